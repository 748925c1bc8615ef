"""
Unit tests for utility helpers.
"""
import random
import unittest

from mcq_quiz.utils import (
    AppError,
    calculate_percentage,
    format_date,
    format_time,
    get_random_items,
    group_by_key,
    handle_error,
    shuffle_array,
    validate_email,
    validate_password,
    validate_quiz_data,
)


class TestFormatting(unittest.TestCase):

    def test_format_time(self):
        self.assertEqual(format_time(0), "00:00")
        self.assertEqual(format_time(59), "00:59")
        self.assertEqual(format_time(125), "02:05")
        self.assertEqual(format_time(6000), "100:00")

    def test_format_date_naive(self):
        self.assertEqual(format_date("2026-10-07T15:05:00"), "Oct 7, 2026, 03:05 PM")

    def test_format_date_trimmed_fraction(self):
        formatted = format_date("2026-10-07T15:05:00.12+00:00")

        self.assertIn("2026", formatted)
        self.assertTrue(formatted.endswith(("AM", "PM")))

    def test_format_date_trimmed_fraction_naive(self):
        self.assertEqual(format_date("2026-10-07T15:05:00.5"), "Oct 7, 2026, 03:05 PM")

    def test_format_date_with_timezone(self):
        formatted = format_date("2026-01-02T09:30:00Z")

        self.assertIn("2026", formatted)
        self.assertTrue(formatted.endswith(("AM", "PM")))


class TestPercentage(unittest.TestCase):

    def test_calculate_percentage(self):
        self.assertEqual(calculate_percentage(3, 5), 60)
        self.assertEqual(calculate_percentage(2, 3), 67)
        self.assertEqual(calculate_percentage(1, 8), 13)
        self.assertEqual(calculate_percentage(5, 5), 100)

    def test_calculate_percentage_zero_total(self):
        self.assertEqual(calculate_percentage(0, 0), 0)


class TestValidation(unittest.TestCase):

    def test_validate_email(self):
        self.assertTrue(validate_email("user@example.com"))
        self.assertFalse(validate_email("user@example"))
        self.assertFalse(validate_email("user example@x.com"))
        self.assertFalse(validate_email(None))

    def test_validate_password(self):
        self.assertTrue(validate_password("secret"))
        self.assertFalse(validate_password("short"))
        self.assertFalse(validate_password(""))
        self.assertFalse(validate_password(None))

    def test_validate_quiz_data(self):
        self.assertTrue(validate_quiz_data([1, 2], [None, "a"], 2))
        self.assertFalse(validate_quiz_data([1, 2], [None], 2))
        self.assertFalse(validate_quiz_data((1, 2), [None, None], 2))


class TestArrayHelpers(unittest.TestCase):

    def test_shuffle_array_returns_permutation(self):
        items = list(range(20))

        shuffled = shuffle_array(items, random.Random(1))

        self.assertEqual(sorted(shuffled), items)
        self.assertEqual(items, list(range(20)))
        self.assertNotEqual(shuffled, items)

    def test_shuffle_array_is_deterministic_with_seeded_rng(self):
        self.assertEqual(
            shuffle_array("abcdef", random.Random(3)),
            shuffle_array("abcdef", random.Random(3))
        )

    def test_shuffle_empty_and_single(self):
        self.assertEqual(shuffle_array([]), [])
        self.assertEqual(shuffle_array([1]), [1])

    def test_get_random_items(self):
        items = list(range(10))

        picked = get_random_items(items, 3)

        self.assertEqual(len(picked), 3)
        self.assertEqual(len(set(picked)), 3)
        self.assertEqual(len(get_random_items(items, 50)), 10)
        self.assertEqual(get_random_items(items, 0), [])

    def test_group_by_key(self):
        rows = [{"k": 1, "v": "a"}, {"k": 2, "v": "b"}, {"k": 1, "v": "c"}]

        groups = group_by_key(rows, "k")

        self.assertEqual([row["v"] for row in groups[1]], ["a", "c"])
        self.assertEqual(len(groups[2]), 1)


class TestErrors(unittest.TestCase):

    def test_app_error_fields(self):
        error = AppError("Bad input", "VALIDATION_ERROR")

        self.assertEqual(str(error), "Bad input")
        self.assertEqual(error.code, "VALIDATION_ERROR")
        self.assertTrue(error.timestamp)

    def test_app_error_default_code(self):
        self.assertEqual(AppError("x").code, "UNKNOWN_ERROR")

    def test_handle_error_logs(self):
        with self.assertLogs("mcq_quiz.utils", level="ERROR") as logs:
            handle_error(AppError("Bad input", "VALIDATION_ERROR"))
            handle_error(RuntimeError("boom"))
            handle_error("not an exception")

        self.assertIn("[VALIDATION_ERROR] Bad input", logs.output[0])
        self.assertIn("boom", logs.output[1])
        self.assertIn("unknown error", logs.output[2])


if __name__ == '__main__':
    unittest.main()
