"""Tests for run artifact persistence."""

import json
import os

import pytest

from conftest import FakeAdapter
from searchprobe.errors import ArtifactFormatError, ArtifactNotFoundError
from searchprobe.evaluation import BatchRunner
from searchprobe.execution import QueryExecutor
from searchprobe.models import Query
from searchprobe.storage import find_latest_report, load_run, run_to_document, save_run, save_summary


class TestRunArtifacts:
    def test_round_trip_preserves_order_and_fields(self, sample_run, tmp_path):
        path = save_run(sample_run, tmp_path, stamp="20261019_101500")

        assert path.name == "test_report_20261019_101500.json"
        loaded = load_run(path)
        assert loaded == sample_run
        assert [r.query.text for r in loaded.results] == [r.query.text for r in sample_run.results]

    def test_round_trip_keeps_normalized_response(self, manticore_payload, no_sleep, tmp_path):
        adapter = FakeAdapter([manticore_payload, "garbage", "garbage", "garbage"])
        executor = QueryExecutor(adapter, limit=5, timeout_ms=1000, max_retries=1, sleep=no_sleep.append)
        runner = BatchRunner(adapter, executor, sleep=no_sleep.append)
        run = runner.run([Query(text="Настройка домена"), Query(text="broken")])

        loaded = load_run(save_run(run, tmp_path, stamp="20261019_101600"))

        assert loaded == run
        assert loaded.results[0].response.hits[0].title == "Настройка домена"
        assert loaded.results[0].response.elapsed_reported is True
        assert loaded.results[1].response is None

    def test_record_shape(self, sample_run):
        record = run_to_document(sample_run)["results"][2]

        assert set(record) == {"query", "metrics", "success", "error", "timestamp"}
        assert set(record["metrics"]) == {
            "response_time_ms",
            "search_time_ms",
            "total_results",
            "expected_results",
            "top_score",
            "relevance_score",
            "result_quality",
        }
        assert record["success"] is False
        assert record["error"] == "All search attempts failed"
        assert record["timestamp"].endswith("Z")

    def test_bare_record_list_is_accepted(self, tmp_path):
        path = tmp_path / "test_report_legacy.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "query": "Цели и задачи проекта",
                        "metrics": {
                            "response_time_ms": 812,
                            "search_time_ms": 3,
                            "total_results": 2,
                            "expected_results": 1,
                            "top_score": 0.42,
                            "relevance_score": 70,
                            "result_quality": "good",
                        },
                        "success": True,
                        "error": "",
                        "timestamp": "2025-01-15T10:00:00Z",
                    }
                ],
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )

        run = load_run(path)
        assert run.config.backend_id == "unknown"
        result = run.results[0]
        assert result.quality == "good"
        assert result.query.expected_result_count == 1
        assert result.timestamp.year == 2025

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArtifactNotFoundError):
            load_run(tmp_path / "nope.json")

    @pytest.mark.parametrize("content", ["{not json", '{"foo": 1}', '[{"metrics": {}}]'])
    def test_invalid_artifacts(self, tmp_path, content):
        path = tmp_path / "test_report_bad.json"
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ArtifactFormatError):
            load_run(path)

    def test_find_latest_report(self, sample_run, tmp_path):
        older = save_run(sample_run, tmp_path, stamp="20260101_000000")
        newer = save_run(sample_run, tmp_path, stamp="20260102_000000")
        os.utime(older, (1_000, 1_000))
        os.utime(newer, (2_000, 2_000))
        save_summary("summary", tmp_path, stamp="20260103_000000")

        assert find_latest_report(tmp_path) == newer

    def test_find_latest_report_empty(self, tmp_path):
        with pytest.raises(ArtifactNotFoundError):
            find_latest_report(tmp_path / "missing")
