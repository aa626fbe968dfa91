# Copyright (c) Meta Platforms, Inc. and affiliates.

"""Tests for bounded top-k selection."""

import random
import unittest

from kvstream.errors import InvalidFieldIndexError, ParseError
from kvstream.stats import RunStats
from kvstream.topk import (
    BoundedSelector,
    Comparator,
    run_top_k,
    select_top_k,
    TopKOptions,
    ValueType,
)
from tests.conftest import TOPK_VALUES


class BoundedSelectorTest(unittest.TestCase):
    """Tests for BoundedSelector."""

    def test_top_k(self):
        selector = BoundedSelector(2, Comparator(ValueType.INT64))
        self.assertEqual(len(selector), 0)
        selector.push(b"-3", b"-3")
        self.assertEqual(len(selector), 1)
        selector.push(b"2", b"2")
        self.assertEqual(len(selector), 2)
        selector.push(b"5", b"5")
        self.assertEqual(len(selector), 2)
        self.assertEqual(selector.sorted_items(), [b"5", b"2"])

    def test_bottom_k(self):
        selector = BoundedSelector(2, Comparator(ValueType.INT64, reverse=True))
        for value in [b"5", b"2", b"-3"]:
            selector.push(value, value)
        self.assertEqual(selector.sorted_items(), [b"-3", b"2"])

    def test_push_reports_kept(self):
        selector = BoundedSelector(1, Comparator(ValueType.INT64))
        self.assertTrue(selector.push(b"1", "a"))
        self.assertFalse(selector.push(b"0", "b"))
        self.assertTrue(selector.push(b"2", "c"))
        self.assertEqual(selector.items(), ["c"])

    def test_tie_does_not_evict(self):
        selector = BoundedSelector(1, Comparator(ValueType.INT64))
        selector.push(b"7", "first")
        self.assertFalse(selector.push(b"7", "second"))
        self.assertEqual(selector.items(), ["first"])

    def test_duplicates_are_kept_together(self):
        selector = BoundedSelector(3, Comparator())
        for value in TOPK_VALUES:
            selector.push(value, value)
        self.assertEqual(sorted(selector.items()), [b"7", b"9", b"9"])

    def test_latest_equal_entry_is_evicted_first(self):
        selector = BoundedSelector(2, Comparator(ValueType.INT64))
        selector.push(b"1", "a")
        selector.push(b"1", "b")
        selector.push(b"2", "c")
        self.assertEqual(selector.sorted_items(), ["c", "a"])

    def test_sorted_items_keep_input_order_for_ties(self):
        selector = BoundedSelector(4, Comparator(ValueType.INT64))
        for i, value in enumerate([b"3", b"5", b"3", b"5"]):
            selector.push(value, i)
        self.assertEqual(selector.sorted_items(), [1, 3, 0, 2])

    def test_zero_k_keeps_nothing_but_still_parses(self):
        selector = BoundedSelector(0, Comparator(ValueType.INT64))
        self.assertFalse(selector.push(b"1", "a"))
        self.assertEqual(selector.items(), [])
        with self.assertRaises(ParseError):
            selector.push(b"x", "b")

    def test_negative_k(self):
        with self.assertRaises(ValueError):
            BoundedSelector(-1, Comparator())

    def test_size_never_exceeds_k(self):
        selector = BoundedSelector(5, Comparator(ValueType.INT64))
        for i in range(1000):
            selector.push(str(i).encode(), i)
            self.assertLessEqual(len(selector), 5)
        self.assertEqual(selector.sorted_items(), [999, 998, 997, 996, 995])

    def test_matches_full_sort(self):
        rng = random.Random(1234)
        values = [str(rng.randint(-50, 50)).encode() for _ in range(500)]
        for reverse in (False, True):
            for k in (0, 1, 7, 499, 500, 600):
                with self.subTest(reverse=reverse, k=k):
                    selector = BoundedSelector(
                        k, Comparator(ValueType.INT64, reverse=reverse)
                    )
                    for value in values:
                        selector.push(value, int(value))
                    expected = sorted(
                        (int(v) for v in values), reverse=not reverse
                    )[:k]
                    self.assertEqual(selector.sorted_items(), expected)
                    self.assertEqual(len(selector), min(k, len(values)))


class TopKOptionsTest(unittest.TestCase):
    """Tests for TopKOptions validation."""

    def test_defaults(self):
        options = TopKOptions(k=3)
        self.assertEqual(options.compare_index, 0)
        self.assertEqual(options.value_type, ValueType.BYTES)
        self.assertFalse(options.reverse)
        self.assertFalse(options.sort)

    def test_invalid(self):
        with self.assertRaises(ValueError):
            TopKOptions(k=-1)
        with self.assertRaises(ValueError):
            TopKOptions(k=1, compare_field=0)
        with self.assertRaises(ValueError):
            TopKOptions(k=1, field_delimiter=b"")


class RunTopKTest(unittest.TestCase):
    """Tests for run_top_k on raw lines."""

    def test_bytes_default(self):
        output = list(run_top_k(iter(TOPK_VALUES), TopKOptions(k=3)))
        self.assertEqual(sorted(output), [b"7", b"9", b"9"])

    def test_int64(self):
        options = TopKOptions(k=3, value_type=ValueType.INT64)
        output = list(run_top_k(iter(TOPK_VALUES), options))
        self.assertEqual(sorted(output), [b"11", b"9", b"9"])

    def test_int64_reverse_sorted(self):
        options = TopKOptions(k=3, value_type=ValueType.INT64, reverse=True, sort=True)
        output = list(run_top_k(iter(TOPK_VALUES), options))
        self.assertEqual(output, [b"0", b"1", b"5"])

    def test_int64_sorted_best_first(self):
        options = TopKOptions(k=3, value_type=ValueType.INT64, sort=True)
        output = list(run_top_k(iter(TOPK_VALUES), options))
        self.assertEqual(output, [b"11", b"9", b"9"])

    def test_output_size_is_min_k_n(self):
        for k in (0, 1, 7, 10):
            with self.subTest(k=k):
                output = list(run_top_k(iter(TOPK_VALUES), TopKOptions(k=k)))
                self.assertEqual(len(output), min(k, len(TOPK_VALUES)))

    def test_compare_field_emits_whole_line(self):
        lines = [b"a\t3", b"b\t10", b"c\t7"]
        options = TopKOptions(
            k=2, compare_field=2, value_type=ValueType.INT64, sort=True
        )
        self.assertEqual(list(run_top_k(iter(lines), options)), [b"b\t10", b"c\t7"])

    def test_custom_delimiter(self):
        lines = [b"a,3", b"b,10", b"c,7"]
        options = TopKOptions(
            k=1, compare_field=2, value_type=ValueType.FLOAT64, field_delimiter=b","
        )
        self.assertEqual(list(run_top_k(iter(lines), options)), [b"b,10"])

    def test_empty_input(self):
        self.assertEqual(list(run_top_k(iter([]), TopKOptions(k=3))), [])

    def test_missing_field_is_fatal(self):
        options = TopKOptions(k=2, compare_field=2)
        with self.assertRaises(InvalidFieldIndexError) as ctx:
            list(run_top_k(iter([b"a\t1", b"b"]), options))
        self.assertEqual(ctx.exception.line_number, 2)

    def test_parse_error_is_fatal(self):
        options = TopKOptions(k=2, value_type=ValueType.INT64)
        with self.assertRaises(ParseError) as ctx:
            list(run_top_k(iter([b"1", b"2", b"three"]), options))
        self.assertIn("line 3:", str(ctx.exception))

    def test_stats_records_kept(self):
        stats = RunStats()
        output = list(run_top_k(iter(TOPK_VALUES), TopKOptions(k=3), stats))
        self.assertEqual(len(output), 3)
        self.assertEqual(stats.counters, {"records kept": 3})

    def test_select_top_k_returns_selector(self):
        selector = select_top_k(iter(TOPK_VALUES), TopKOptions(k=2))
        self.assertIsInstance(selector, BoundedSelector)
        self.assertEqual(len(selector), 2)


if __name__ == "__main__":
    unittest.main()
