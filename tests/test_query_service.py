"""
InsightQueryService 测试
使用 Mock 仓库测试回退链
"""

import unittest
from unittest.mock import Mock

from insight_dashboard.insights.models import FallbackReason, InsightDocument
from insight_dashboard.insights.query_service import (
    InsightNotFoundError,
    InsightQueryService,
    is_valid_document_id
)


DOC_ID = "3f2b8c1e-5a4d-4e6f-9b7a-1c2d3e4f5a6b"
OTHER_ID = "9a8b7c6d-5e4f-4a3b-8c2d-1e0f9a8b7c6d"


def make_document(doc_id=DOC_ID, subreddit="uberdrivers"):
    return InsightDocument(
        id=doc_id,
        subreddit=subreddit,
        raw_insights=[{"topic": "Tips", "date": "2024-01-05", "num_mentions": 2}],
        filtered_insights=[{"topic": "Tips", "filter_type": "top", "mentions": []}],
    )


class TestIsValidDocumentId(unittest.TestCase):
    def test_valid(self):
        self.assertTrue(is_valid_document_id(DOC_ID))
        self.assertTrue(is_valid_document_id(DOC_ID.upper()))

    def test_invalid(self):
        for value in (None, "", "abc", "12345", DOC_ID[:-1]):
            with self.subTest(value=value):
                self.assertFalse(is_valid_document_id(value))


class TestInsightQueryService(unittest.TestCase):
    """测试文档解析的回退链"""

    def setUp(self):
        self.repo = Mock()
        self.repo.get_by_id.return_value = None
        self.repo.find_latest_for_subreddit.return_value = None
        self.service = InsightQueryService(self.repo)

    def test_exact_hit(self):
        """测试按 id 精确命中时没有 Fallback"""
        self.repo.get_by_id.return_value = make_document()

        result = self.service.query("uberdrivers", DOC_ID)

        self.assertEqual(result.resolved_id, DOC_ID)
        self.assertIsNone(result.fallback)
        self.assertNotIn("Fallback", result.to_dict())
        self.repo.find_latest_for_subreddit.assert_not_called()

    def test_missing_id(self):
        """测试未提供 id 时返回最新文档"""
        self.repo.find_latest_for_subreddit.return_value = make_document()

        result = self.service.query("uberdrivers")

        self.assertEqual(result.fallback.reason, FallbackReason.MISSING_ID)
        self.assertEqual(result.to_dict()["Fallback"], {
            "reason": "missing-id",
            "requestedSubreddit": "uberdrivers",
        })
        self.repo.get_by_id.assert_not_called()

    def test_invalid_id_skips_lookup(self):
        """测试非法 id 不做按 id 查询"""
        self.repo.find_latest_for_subreddit.return_value = make_document()

        result = self.service.query("uberdrivers", "not-a-uuid")

        self.repo.get_by_id.assert_not_called()
        self.assertEqual(result.fallback.reason, FallbackReason.INVALID_ID)
        self.assertEqual(result.fallback.requested_id, "not-a-uuid")
        self.assertEqual(result.resolved_id, DOC_ID)

    def test_not_found(self):
        """测试 id 合法但不存在"""
        self.repo.find_latest_for_subreddit.return_value = make_document(OTHER_ID)

        result = self.service.query("uberdrivers", DOC_ID)

        self.assertEqual(result.fallback.reason, FallbackReason.NOT_FOUND)
        self.assertEqual(result.resolved_id, OTHER_ID)
        self.assertEqual(result.to_dict()["Fallback"]["requestedId"], DOC_ID)

    def test_subreddit_mismatch(self):
        """测试 id 属于其他 subreddit 时丢弃该文档"""
        self.repo.get_by_id.return_value = make_document(DOC_ID, "lyftdrivers")
        self.repo.find_latest_for_subreddit.return_value = make_document(OTHER_ID, "uberdrivers")

        result = self.service.query("uberdrivers", DOC_ID)

        self.assertEqual(result.subreddit, "uberdrivers")
        self.assertEqual(result.resolved_id, OTHER_ID)
        self.assertEqual(result.fallback.reason, FallbackReason.SUBREDDIT_MISMATCH)
        self.repo.find_latest_for_subreddit.assert_called_once_with("uberdrivers")

    def test_subreddit_comparison_is_exact(self):
        """测试 id 命中时 subreddit 比较区分大小写"""
        self.repo.get_by_id.return_value = make_document(DOC_ID, "UberDrivers")
        self.repo.find_latest_for_subreddit.return_value = make_document(OTHER_ID, "uberdrivers")

        result = self.service.query("uberdrivers", DOC_ID)

        self.assertEqual(result.fallback.reason, FallbackReason.SUBREDDIT_MISMATCH)

    def test_case_insensitive_latest(self):
        """测试最新文档的 subreddit 大小写可能与请求不同，结果使用文档本身的值"""
        self.repo.find_latest_for_subreddit.return_value = make_document(subreddit="uberdrivers")

        result = self.service.query("UberDrivers")

        self.assertEqual(result.subreddit, "uberdrivers")
        self.assertEqual(result.fallback.requested_subreddit, "UberDrivers")

    def test_nothing_found(self):
        """测试所有回退都失败"""
        with self.assertRaises(InsightNotFoundError) as ctx:
            self.service.query("emptysub")
        self.assertEqual(ctx.exception.message, "No insight data found for subreddit emptysub.")

    def test_nothing_found_with_id(self):
        with self.assertRaises(InsightNotFoundError) as ctx:
            self.service.query("emptysub", DOC_ID)
        self.assertEqual(ctx.exception.message, f"No insight data found for id {DOC_ID} (emptysub).")

    def test_repository_errors_propagate(self):
        """测试存储异常不被吞掉"""
        self.repo.find_latest_for_subreddit.side_effect = ConnectionError("boom")

        with self.assertRaises(ConnectionError):
            self.service.query("uberdrivers")

    def test_mapping_applied(self):
        """测试结果中的洞察已映射"""
        self.repo.get_by_id.return_value = make_document()

        result = self.service.query("uberdrivers", DOC_ID, include_daily=True).to_dict()

        self.assertEqual(result["Subreddit"], "uberdrivers")
        self.assertEqual(result["Raw_insights"][0]["Topic"], "Tips")
        self.assertEqual(result["Raw_insights"][0]["Timeline"], "2024-01-05")
        self.assertEqual(result["Raw_insights"][0]["DailyMentions"], [{"date": "2024-01-05", "count": 2}])
        self.assertEqual(result["Filtered_Insights"][0]["FilterType"], "top")
        self.assertNotIn("HourlyMentions", result["Filtered_Insights"][0])


class TestInsightDocument(unittest.TestCase):
    def test_from_row_tolerates_bad_collections(self):
        doc = InsightDocument.from_row({
            "id": DOC_ID,
            "subreddit": "uberdrivers",
            "raw_insights": None,
            "filtered_insights": "oops",
            "created_at": "2024-01-05T10:00:00Z",
        })

        self.assertEqual(doc.raw_insights, [])
        self.assertEqual(doc.filtered_insights, [])
        self.assertEqual(doc.created_at.year, 2024)
        self.assertIsNone(doc.updated_at)


if __name__ == "__main__":
    unittest.main()
