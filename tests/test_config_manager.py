"""
Unit tests for ConfigManager class.
"""
import unittest

from mcq_quiz.config_manager import ConfigManager


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager functionality."""

    def setUp(self):
        self.config = ConfigManager()

    def test_defaults(self):
        settings = self.config.get_quiz_settings()

        self.assertIsNone(settings.question_count)
        self.assertFalse(settings.random_order)
        self.assertEqual(settings.time_limit, 3600)
        self.assertEqual(self.config.api_timeout, 5000)
        self.assertEqual(self.config.app_name, "MCQ Quiz App")
        self.assertFalse(self.config.is_backend_configured())

    def test_get_quiz_settings_returns_copy(self):
        settings = self.config.get_quiz_settings()
        settings.question_count = 3

        self.assertIsNone(self.config.get_quiz_settings().question_count)

    def test_set_question_count_valid(self):
        result = self.config.set_question_count(10)

        self.assertTrue(result['success'])
        self.assertEqual(self.config.get_quiz_settings().question_count, 10)

    def test_set_question_count_none(self):
        self.config.set_question_count(10)

        result = self.config.set_question_count(None)

        self.assertTrue(result['success'])
        self.assertIsNone(self.config.get_quiz_settings().question_count)

    def test_set_question_count_invalid(self):
        for value in (0, 101, "5", 2.5, True):
            with self.subTest(value=value):
                result = self.config.set_question_count(value)
                self.assertFalse(result['success'])
                self.assertIn('error', result)
                self.assertTrue(result['user_message'].startswith("❌"))

        self.assertIsNone(self.config.get_quiz_settings().question_count)

    def test_set_random_order(self):
        self.assertTrue(self.config.set_random_order(True)['success'])
        self.assertTrue(self.config.get_quiz_settings().random_order)
        self.assertFalse(self.config.set_random_order("yes")['success'])

    def test_toggle_random_order(self):
        result = self.config.toggle_random_order()

        self.assertTrue(result['success'])
        self.assertTrue(result['new_value'])
        self.assertFalse(self.config.toggle_random_order()['new_value'])

    def test_set_time_limit(self):
        self.assertTrue(self.config.set_time_limit(600)['success'])
        self.assertEqual(self.config.get_quiz_settings().time_limit, 600)
        self.assertFalse(self.config.set_time_limit(5)['success'])
        self.assertFalse(self.config.set_time_limit(10 ** 6)['success'])
        self.assertEqual(self.config.get_quiz_settings().time_limit, 600)

    def test_set_api_timeout(self):
        self.assertTrue(self.config.set_api_timeout(2000)['success'])
        self.assertEqual(self.config.get_backend_settings()['timeout'], 2.0)
        self.assertFalse(self.config.set_api_timeout(10)['success'])

    def test_load_from_env(self):
        errors = self.config.load_from_env({
            "SUPABASE_URL": "https://example.supabase.co",
            "SUPABASE_ANON_KEY": "anon-key",
            "APP_NAME": "Trivia",
            "API_TIMEOUT": "8000",
            "ENABLE_DEMO_MODE": "true",
            "QUIZ_TIME_LIMIT": "900"
        })

        self.assertEqual(errors, [])
        self.assertTrue(self.config.is_backend_configured())
        self.assertEqual(self.config.app_name, "Trivia")
        self.assertEqual(self.config.api_timeout, 8000)
        self.assertTrue(self.config.demo_mode)
        self.assertEqual(self.config.get_quiz_settings().time_limit, 900)

    def test_load_from_env_rejects_bad_values(self):
        errors = self.config.load_from_env({"API_TIMEOUT": "fast", "QUIZ_TIME_LIMIT": "1"})

        self.assertEqual(len(errors), 2)
        self.assertEqual(self.config.api_timeout, 5000)
        self.assertEqual(self.config.get_quiz_settings().time_limit, 3600)

    def test_load_from_dict(self):
        errors = self.config.load_from_dict({
            "backend": {"url": "https://example.supabase.co", "anon_key": "k", "api_timeout": 3000},
            "app": {"name": "Trivia", "version": "2.0.0"},
            "features": {"demo_mode": False, "analytics": True},
            "quiz": {"question_count": 3, "random_order": True, "time_limit": 120, "question_limit": 50}
        })

        self.assertEqual(errors, [])
        settings = self.config.get_quiz_settings()
        self.assertEqual(settings.question_count, 3)
        self.assertTrue(settings.random_order)
        self.assertEqual(settings.time_limit, 120)
        self.assertEqual(self.config.question_limit, 50)
        self.assertTrue(self.config.analytics)
        self.assertEqual(self.config.app_version, "2.0.0")

    def test_load_from_dict_collects_errors(self):
        errors = self.config.load_from_dict({"quiz": {"question_count": 0, "time_limit": "long"}})

        self.assertEqual(len(errors), 2)

    def test_validate_settings(self):
        self.config.demo_mode = True
        self.assertTrue(self.config.validate_settings()['valid'])

        self.config.demo_mode = False
        result = self.config.validate_settings()
        self.assertFalse(result['valid'])
        self.assertEqual(len(result['issues']), 1)

    def test_reset_to_defaults(self):
        self.config.set_question_count(5)
        self.config.backend_url = "https://example.supabase.co"

        self.config.reset_to_defaults()

        self.assertIsNone(self.config.get_quiz_settings().question_count)
        self.assertIsNone(self.config.backend_url)

    def test_settings_summary_hides_key(self):
        self.config.backend_url = "https://example.supabase.co"
        self.config.backend_key = "super-secret"

        summary = self.config.get_settings_summary()

        self.assertIn("https://example.supabase.co", summary)
        self.assertIn("sequential", summary)
        self.assertNotIn("super-secret", summary)


if __name__ == '__main__':
    unittest.main()
