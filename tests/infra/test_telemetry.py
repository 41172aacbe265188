from __future__ import annotations

import unittest

from perkq.observability.telemetry import (
    counter,
    get_counter,
    get_latency_stats,
    reset,
    time_block,
)


class TelemetryTests(unittest.TestCase):
    def setUp(self):
        reset()

    def test_time_block_appends_ms_suffix(self):
        metric_name = "extraction.latency"

        with time_block(metric_name):
            pass

        stats = get_latency_stats(metric_name)
        self.assertEqual(stats["count"], 1)
        self.assertEqual(get_latency_stats("extraction.latency_ms")["count"], 1)
        self.assertGreaterEqual(stats["p95"], 0.0)

    def test_time_block_respects_existing_suffix(self):
        metric_name = "pipeline.total_ms"

        with time_block(metric_name):
            pass

        stats = get_latency_stats(metric_name)
        self.assertEqual(stats["count"], 1)

    def test_time_block_records_on_error(self):
        with self.assertRaises(RuntimeError), time_block("parse.latency"):
            raise RuntimeError("boom")

        self.assertEqual(get_latency_stats("parse.latency")["count"], 1)

    def test_counter_increments(self):
        before = counter("test.counter", 0)
        counter("test.counter")
        after = counter("test.counter", 0)
        self.assertEqual(after, before + 1)

    def test_get_counter_defaults_to_zero(self):
        self.assertEqual(get_counter("never.touched"), 0)
        counter("extraction.candidates", 4)
        self.assertEqual(get_counter("extraction.candidates"), 4)

    def test_reset_clears_everything(self):
        counter("extraction.runs")
        with time_block("extraction.latency"):
            pass

        reset()

        self.assertEqual(get_counter("extraction.runs"), 0)
        self.assertEqual(get_latency_stats("extraction.latency")["count"], 0)


if __name__ == "__main__":
    unittest.main()
