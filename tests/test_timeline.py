"""
timeline.py 单元测试
测试原始 / 过滤洞察的时间线回退链
"""

from datetime import datetime, timezone

from insight_dashboard.insights.timeline import (
    UNKNOWN_DATE,
    Timeline,
    format_display_timeline,
    latest_mention_date,
    parse_timeline_label,
    resolve_date_range,
    resolve_filtered_timeline,
    resolve_raw_timeline
)


UTC = timezone.utc


class TestRawTimeline:
    """测试原始洞察时间线"""

    def test_direct_date(self):
        """测试直接日期优先"""
        insight = {
            "date": "2024-01-05T10:00:00Z",
            "mentions": [{"date_posted": "2024-02-01T00:00:00Z"}]
        }
        assert resolve_raw_timeline(insight).label == "2024-01-05"

    def test_latest_mention_wins(self):
        """测试没有 date 时取最新的 mention"""
        insight = {
            "mentions": [
                {"date_posted": "2024-01-03T08:00:00Z"},
                {"date_posted": "2024-01-07T23:00:00Z"},
                {"date_posted": "2024-01-05T12:00:00Z"},
            ]
        }
        timeline = resolve_raw_timeline(insight)

        assert timeline.label == "2024-01-07"
        assert timeline.start == timeline.end == datetime(2024, 1, 7, tzinfo=UTC)

    def test_data_posted_typo(self):
        """测试兼容 data_posted 拼写错误"""
        insight = {"mentions": [{"data_posted": 1704448800}]}
        assert resolve_raw_timeline(insight).label == "2024-01-05"

    def test_unparsable_date_falls_through(self):
        """测试 date 无法解析时继续使用 mentions"""
        insight = {"date": "sometime", "mentions": [{"date_posted": "2024-01-05T10:00:00Z"}]}
        assert resolve_raw_timeline(insight).label == "2024-01-05"

    def test_unknown(self):
        """测试什么都没有时返回 Unknown date"""
        timeline = resolve_raw_timeline({"topic": "X", "mentions": []})

        assert timeline.label == UNKNOWN_DATE
        assert timeline.resolved is False

    def test_non_mapping(self):
        assert resolve_raw_timeline(None).label == UNKNOWN_DATE
        assert resolve_raw_timeline("text").label == UNKNOWN_DATE

    def test_latest_mention_skips_bad_entries(self):
        """测试跳过非 dict 和无日期的 mention"""
        mentions = [None, "x", {"score": 3}, {"date_posted": "2024-01-02"}]
        assert latest_mention_date({"mentions": mentions}) == datetime(2024, 1, 2, tzinfo=UTC)


class TestFilteredTimeline:
    """测试过滤洞察时间线"""

    def test_direct_date_fields(self):
        """测试 filter_date / filtered_at / generated_at"""
        assert resolve_filtered_timeline({"filter_date": "2024-03-01"}).label == "2024-03-01"
        assert resolve_filtered_timeline({"generated_at": "2024-03-02T05:00:00Z"}).label == "2024-03-02"

    def test_date_range(self):
        """测试 filter_criteria.date_range"""
        insight = {"filter_criteria": {"date_range": ["2024-01-01", "2024-01-07"]}}
        timeline = resolve_filtered_timeline(insight)

        assert timeline.label == "2024-01-01 - 2024-01-07"
        assert timeline.start == datetime(2024, 1, 1, tzinfo=UTC)
        assert timeline.end == datetime(2024, 1, 7, tzinfo=UTC)

    def test_date_range_same_day_collapses(self):
        """测试起止同一天时折叠成单日"""
        insight = {"filter_criteria": {"date_range": ["2024-01-05T01:00:00Z", "2024-01-05T22:00:00Z"]}}
        assert resolve_filtered_timeline(insight).label == "2024-01-05"

    def test_date_range_mapping(self):
        """测试 {start, end} 形态"""
        insight = {"filter_criteria": {"date_range": {"start": "2024-01-01", "end": "2024-01-03"}}}
        assert resolve_filtered_timeline(insight).label == "2024-01-01 - 2024-01-03"

    def test_date_range_one_side(self):
        """测试只有一端可解析"""
        assert resolve_date_range(["bad", "2024-01-03"]).label == "2024-01-03"
        assert resolve_date_range(["bad", None]) is None
        assert resolve_date_range("2024-01-03") is None

    def test_record_timestamp(self):
        """测试 updated_at / created_at 回退"""
        insight = {"filter_criteria": {"min_score": 10}, "created_at": "2024-04-01T12:00:00Z"}
        assert resolve_filtered_timeline(insight).label == "2024-04-01"

    def test_mentions_last(self):
        """测试最后回退到 mentions"""
        insight = {"filter_type": "top", "mentions": [{"date_posted": "2024-05-05T05:05:05Z"}]}
        assert resolve_filtered_timeline(insight).label == "2024-05-05"

    def test_unknown(self):
        assert resolve_filtered_timeline({"filter_type": "top"}).label == UNKNOWN_DATE
        assert resolve_filtered_timeline(None).label == UNKNOWN_DATE


class TestTimelineLabels:
    """测试标签反解析和展示格式"""

    def test_parse_single(self):
        timeline = parse_timeline_label("2024-01-05")
        assert timeline == Timeline("2024-01-05", datetime(2024, 1, 5, tzinfo=UTC), datetime(2024, 1, 5, tzinfo=UTC))

    def test_parse_range(self):
        timeline = parse_timeline_label("2024-01-01 - 2024-01-07")
        assert timeline.start == datetime(2024, 1, 1, tzinfo=UTC)
        assert timeline.end == datetime(2024, 1, 7, tzinfo=UTC)

    def test_parse_unresolvable(self):
        assert parse_timeline_label(UNKNOWN_DATE) is None
        assert parse_timeline_label("") is None
        assert parse_timeline_label(None) is None
        assert parse_timeline_label("2024-01-01 - later") is None

    def test_display(self):
        assert format_display_timeline("2024-01-05") == "01/05/2024"
        assert format_display_timeline("2024-01-01 - 2024-01-07") == "01/01/2024 - 01/07/2024"
        assert format_display_timeline(UNKNOWN_DATE) == UNKNOWN_DATE
