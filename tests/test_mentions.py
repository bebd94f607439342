"""
mentions.py 单元测试
"""

import pytest

from insight_dashboard.insights.mentions import (
    MentionBucket,
    bucket_mentions,
    count_mentions,
    daily_mentions,
    hourly_mentions
)
from insight_dashboard.insights.timeline import resolve_filtered_timeline


class TestCountMentions:
    """测试提及数计算"""

    def test_num_mentions_is_authoritative(self):
        """测试 num_mentions 优先于列表长度"""
        assert count_mentions({"num_mentions": 12, "mentions": [{}, {}]}) == 12

    def test_float_num_mentions(self):
        assert count_mentions({"num_mentions": 3.0}) == 3

    def test_list_length_fallback(self):
        assert count_mentions({"mentions": [{}, {}, {}]}) == 3

    @pytest.mark.parametrize("declared", [-1, "7", None, True, float("nan")])
    def test_invalid_num_mentions(self, declared):
        """测试不可用的 num_mentions 回退到列表长度"""
        assert count_mentions({"num_mentions": declared, "mentions": [{}]}) == 1

    def test_zero_num_mentions(self):
        """测试 num_mentions 为 0 也算有效"""
        assert count_mentions({"num_mentions": 0, "mentions": [{}, {}]}) == 0

    def test_huge_num_mentions(self):
        """测试超出 float 范围的 num_mentions 回退到列表长度"""
        assert count_mentions({"num_mentions": 10 ** 400, "mentions": [{}, {}]}) == 2
        assert count_mentions({"num_mentions": 10 ** 400, "mentions": []}) == 0

    def test_nothing(self):
        assert count_mentions({}) == 0
        assert count_mentions({"mentions": "a lot"}) == 0
        assert count_mentions(None) == 0


class TestBucketMentions:
    """测试分桶"""

    def test_hourly_buckets(self):
        """测试按小时分桶并升序排列"""
        insight = {
            "mentions": [
                {"date_posted": "2024-01-05T11:59:00Z"},
                {"date_posted": "2024-01-05T10:05:00Z"},
                {"date_posted": "2024-01-05T10:55:00Z"},
            ]
        }
        assert hourly_mentions(insight) == [
            MentionBucket("2024-01-05T10:00:00Z", 2),
            MentionBucket("2024-01-05T11:00:00Z", 1),
        ]

    def test_daily_buckets(self):
        insight = {
            "mentions": [
                {"date_posted": "2024-01-06T01:00:00Z"},
                {"date_posted": 1704448800},
                {"data_posted": "2024-01-05T23:00:00Z"},
            ]
        }
        assert [b.to_dict() for b in daily_mentions(insight)] == [
            {"date": "2024-01-05", "count": 2},
            {"date": "2024-01-06", "count": 1},
        ]

    def test_undated_mentions_skipped(self):
        """测试无法解析日期的 mention 被跳过"""
        insight = {
            "mentions": [
                {"date_posted": "garbage"},
                {"post_id": "abc"},
                {"date_posted": "2024-01-05T10:00:00Z"},
            ]
        }
        assert hourly_mentions(insight) == [MentionBucket("2024-01-05T10:00:00Z", 1)]

    def test_all_mentions_undated(self):
        """测试 mentions 非空但全部无日期时不生成合成桶"""
        insight = {"date": "2024-01-05", "mentions": [{"post_id": "abc"}]}
        assert hourly_mentions(insight) == []

    def test_synthetic_bucket_from_date(self):
        """测试没有 mentions 时用洞察日期生成合成桶"""
        insight = {"date": "2024-01-05T10:30:00Z", "num_mentions": 5, "mentions": []}
        assert hourly_mentions(insight) == [MentionBucket("2024-01-05T10:00:00Z", 5)]
        assert daily_mentions(insight) == [MentionBucket("2024-01-05", 5)]

    def test_synthetic_bucket_from_created_at(self):
        insight = {"created_at": "2024-02-01T08:00:00Z", "num_mentions": 2}
        assert daily_mentions(insight) == [MentionBucket("2024-02-01", 2)]

    def test_synthetic_bucket_from_timeline_end(self):
        """测试没有直接日期时锚定到时间线结束日"""
        insight = {
            "num_mentions": 4,
            "filter_criteria": {"date_range": ["2024-01-01", "2024-01-07"]}
        }
        assert daily_mentions(insight, resolve_filtered_timeline) == [MentionBucket("2024-01-07", 4)]

    def test_no_date_at_all(self):
        assert bucket_mentions({"num_mentions": 9}) == []
        assert bucket_mentions(None) == []

    def test_invalid_granularity(self):
        with pytest.raises(ValueError):
            bucket_mentions({"date": "2024-01-05"}, "minute")
