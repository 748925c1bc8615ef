"""
Tests for the terminal entry point's history view.
"""
import io
import unittest
from contextlib import redirect_stdout

from main import show_history
from mcq_quiz.backend_client import BackendError
from mcq_quiz.results_manager import ResultsManager
from tests.test_fixtures import TestFixtures


class TestShowHistory(unittest.IsolatedAsyncioTestCase):
    """Test cases for printing history, statistics and rank."""

    def setUp(self):
        self.client = TestFixtures.create_mock_client()
        self.results = ResultsManager(self.client)

    async def test_prints_attempts_statistics_and_rank(self):
        self.client.select.side_effect = [
            [{"score": 4, "total_questions": 5, "duration_seconds": 125,
              "created_at": "2026-10-07T15:05:00.12"}],
            [{"score": 4, "total_questions": 5, "duration_seconds": 125}],
            [{"score": 5}]
        ]

        output = io.StringIO()
        with redirect_stdout(output):
            await show_history(self.results, "u1")

        text = output.getvalue()
        self.assertIn("Oct 7, 2026, 03:05 PM: 4/5 (80%) in 02:05", text)
        self.assertIn("best score: 4", text)
        self.assertIn("#2", text)

    async def test_history_failure_is_reported(self):
        self.client.select.side_effect = BackendError("timeout")

        output = io.StringIO()
        with redirect_stdout(output):
            await show_history(self.results, "u1")

        self.assertIn("Could not load history: timeout", output.getvalue())
        self.assertEqual(self.client.select.await_count, 1)


if __name__ == '__main__':
    unittest.main()
