"""Tests for observability metrics module."""

from parseai.observability.metrics import MAX_LATENCY_SAMPLES, MetricsStore


class TestStageMetrics:
    """Tests for stage-level metrics."""

    def test_record_latency(self):
        store = MetricsStore()
        store.record_stage_latency("fetch_url", 50.0)
        store.record_stage_latency("fetch_url", 100.0)
        store.record_stage_latency("fetch_url", 150.0)

        summary = store.get_summary()
        stage = summary["stages"]["fetch_url"]

        assert stage["call_count"] == 3
        assert stage["p50_ms"] == 100.0
        assert stage["max_ms"] == 150.0

    def test_record_stage_error(self):
        store = MetricsStore()
        store.record_stage_error("fetch_url", "TIMEOUT")
        store.record_stage_error("fetch_url", "TIMEOUT")
        store.record_stage_error("fetch_url", "HTTP_ERROR")

        summary = store.get_summary()
        errors = summary["stages"]["fetch_url"]["errors"]

        assert errors["TIMEOUT"] == 2
        assert errors["HTTP_ERROR"] == 1
        assert summary["global_errors"]["TIMEOUT"] == 2

    def test_error_rate_and_last_error(self):
        store = MetricsStore()
        for _ in range(4):
            store.record_stage_latency("parse_document", 5.0)
        store.record_stage_error("parse_document", "CSV_PARSE_FAILED")

        stage = store.get_summary()["stages"]["parse_document"]

        assert stage["error_rate"] == 0.25
        assert stage["last_error"] == "CSV_PARSE_FAILED"

    def test_latency_window_is_bounded(self):
        store = MetricsStore()
        for ms in range(MAX_LATENCY_SAMPLES + 500):
            store.record_stage_latency("model_call", float(ms))

        stage = store.get_summary()["stages"]["model_call"]

        assert stage["call_count"] == MAX_LATENCY_SAMPLES + 500
        assert stage["max_ms"] == float(MAX_LATENCY_SAMPLES + 499)
        assert stage["p50_ms"] >= 500.0

    def test_global_errors(self):
        store = MetricsStore()
        store.record_error("FEATURE_DISABLED")

        assert store.get_summary()["global_errors"]["FEATURE_DISABLED"] == 1


class TestResponsePaths:
    """Tests for model vs heuristic accounting."""

    def test_record_response(self):
        store = MetricsStore()
        store.record_response("heuristic")
        store.record_response("heuristic")
        store.record_response("model")

        responses = store.get_summary()["responses"]
        assert responses == {"heuristic": 2, "model": 1}

    def test_reset(self):
        store = MetricsStore()
        store.record_stage_latency("model_call", 10.0)
        store.record_response("model")
        store.reset()

        summary = store.get_summary()
        assert summary["stages"] == {}
        assert summary["responses"] == {}
