"""Tests for payload shape detection and normalization."""

import pytest
from structlog.testing import capture_logs

from searchprobe.errors import MalformedResponseError
from searchprobe.models import Hit, TabularRows
from searchprobe.normalization import (
    BareHitList,
    FlatHitsEnvelope,
    NestedHitsEnvelope,
    TabularPayload,
    UnrecognizedPayload,
    decode_payload,
    normalize,
)

HIT_FIELDS = set(Hit.model_fields)


def _tabular() -> TabularRows:
    return TabularRows(
        columns=("id", "url", "created_at", "title_text", "content_text", "score"),
        rows=(
            (7, "https://example.com/pages/test_period.html", 1700000000, "", "Тестовый период 14 дней", 1650),
            (8, "https://example.com/pages/ads.html", 1700000001, "Реклама", "", 420),
        ),
    )


class TestDecodePayload:
    def test_nested_envelope(self, manticore_payload):
        shape = decode_payload(manticore_payload)
        assert isinstance(shape, NestedHitsEnvelope)
        assert shape.total == 3
        assert shape.took == 4

    def test_elasticsearch_style_total_object(self):
        shape = decode_payload({"hits": {"total": {"value": 50, "relation": "gte"}, "hits": []}})
        assert isinstance(shape, NestedHitsEnvelope)
        assert shape.total == 50
        assert shape.relation == "gte"

    def test_flat_envelope_uses_explicit_total(self):
        shape = decode_payload({"total": 9, "took": 2, "hits": [{"_id": "1"}]})
        assert isinstance(shape, FlatHitsEnvelope)
        assert shape.total == 9

    def test_flat_envelope_without_total_counts_hits(self):
        shape = decode_payload({"results": [{"id": 1}, {"id": 2}]})
        assert isinstance(shape, FlatHitsEnvelope)
        assert shape.total == 2

    def test_total_only_envelope(self):
        shape = decode_payload({"total": 0, "took": 1})
        assert isinstance(shape, FlatHitsEnvelope)
        assert shape.hits == []

    def test_bare_list(self):
        assert isinstance(decode_payload([{"id": 1}]), BareHitList)

    def test_tabular(self):
        assert isinstance(decode_payload(_tabular()), TabularPayload)

    def test_delimited_text_is_tabular(self):
        text = "id\turl\tcreated_at\ttitle_text\tcontent_text\tscore\n1\thttp://x/a_b.txt\t0\t\tbody\t1500\n"
        shape = decode_payload(text)

        assert isinstance(shape, TabularPayload)
        assert shape.table.columns[-1] == "score"
        assert len(shape.table.rows) == 1

    def test_single_column_text_is_unrecognized(self):
        assert isinstance(decode_payload("id\n1\n2\n"), UnrecognizedPayload)

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "<html>502 Bad Gateway</html>",
            {"error": "index documents: syntax error"},
            {"timed_out": True},
            [1, 2, 3],
            {"hits": ["a", "b"]},
            TabularRows(columns=("score",)),
            42,
        ],
    )
    def test_unrecognized(self, raw):
        assert isinstance(decode_payload(raw), UnrecognizedPayload)

    def test_error_reason_is_kept(self):
        shape = decode_payload({"error": "unknown index 'docs'"})
        assert "unknown index" in shape.reason


class TestNormalize:
    def test_nested_envelope(self, manticore_payload):
        response = normalize(manticore_payload)

        assert response.total_results == 3
        assert response.elapsed_ms == 4
        assert response.elapsed_reported is True
        assert response.max_score == pytest.approx(0.61)
        assert [h.id for h in response.hits] == ["101", "102", "103"]
        assert response.hits[0].title == "Настройка домена"
        assert not response.truncated

    def test_placeholders_for_empty_fields(self, manticore_payload):
        hit = normalize(manticore_payload).hits[1]
        assert hit.title == "Untitled"
        assert hit.url == "#"
        assert hit.content == "No content available"

    def test_top_level_hit_fields(self):
        response = normalize([{"id": 5, "score": "0.7", "title": "Plain", "url": "/p"}])
        hit = response.hits[0]
        assert (hit.id, hit.score, hit.title, hit.url) == ("5", 0.7, "Plain", "/p")
        assert response.elapsed_ms == 0
        assert response.elapsed_reported is False

    def test_invalid_scores_clamp_to_zero(self):
        response = normalize({"hits": [{"_score": -3}, {"_score": "n/a"}, {"_score": None}]})
        assert [h.score for h in response.hits] == [0.0, 0.0, 0.0]
        assert response.max_score == 0.0

    def test_truncated_page_is_distinguishable(self):
        response = normalize({"hits": {"total": 40, "hits": [{"_id": "1", "_score": 1.0}]}})
        assert response.total_results == 40
        assert response.truncated

    def test_total_never_below_hit_count(self):
        response = normalize({"total": 0, "hits": [{"_id": "1"}, {"_id": "2"}]})
        assert response.total_results == 2

    def test_empty_result_is_valid(self):
        response = normalize({"hits": {"total": 0, "hits": []}, "took": 1})
        assert response.total_results == 0
        assert response.max_score == 0.0
        assert response.hits == []

    def test_tabular_rows(self):
        response = normalize(_tabular())

        assert response.total_results == 2
        assert response.elapsed_reported is False
        first, second = response.hits
        assert first.id == "7"
        assert first.score == pytest.approx(1.65)
        assert first.title == "test period"
        assert first.content == "Тестовый период 14 дней"
        assert second.content == "No content available"
        assert response.max_score == pytest.approx(1.65)

    def test_tabular_from_text(self):
        text = "id\turl\tcreated_at\ttitle_text\tcontent_text\tscore\n3\t\t0\t\tbody\t500\n"
        hit = normalize(TabularRows.from_text(text)).hits[0]
        assert hit.title == "Untitled"
        assert hit.url == "#"
        assert hit.score == pytest.approx(0.5)

    def test_delimited_text_normalizes(self):
        text = "id\turl\tcreated_at\ttitle_text\tcontent_text\tscore\n1\thttp://x/a_b.txt\t0\t\tbody\t1500\n"
        response = normalize(text)

        assert response.total_results == 1
        hit = response.hits[0]
        assert (hit.id, hit.title, hit.url, hit.content) == ("1", "a b", "http://x/a_b.txt", "body")
        assert hit.score == pytest.approx(1.5)

    def test_short_tabular_rows_are_reported(self):
        table = TabularRows(
            columns=("id", "url", "created_at", "title_text", "content_text", "score"),
            rows=((1, "/a.html", 0, "A", "text", 900), ("orphan",)),
        )
        with capture_logs() as logs:
            response = normalize(table)

        assert [h.id for h in response.hits] == ["1"]
        dropped = [entry for entry in logs if entry["event"] == "tabular_rows_dropped"]
        assert dropped and dropped[0]["dropped"] == 1
        assert dropped[0]["log_level"] == "warning"

    def test_every_shape_yields_the_same_hit_fields(self, manticore_payload):
        payloads = [
            manticore_payload,
            {"total": 1, "hits": [{"_id": "1"}]},
            [{"id": "1"}],
            _tabular(),
        ]
        for payload in payloads:
            for hit in normalize(payload).hits:
                assert set(hit.model_dump()) == HIT_FIELDS

    def test_canonical_envelope_normalizes_to_itself(self, manticore_payload):
        response = normalize(manticore_payload)
        envelope = response.to_envelope()

        assert set(envelope) == {"total", "took", "max_score", "hits"}
        assert set(envelope["hits"][0]) == {"_id", "_score", "_source"}
        again = normalize(envelope)
        assert again.hits == response.hits
        assert again.total_results == response.total_results

    def test_unrecognized_raises(self):
        with pytest.raises(MalformedResponseError, match="backend error"):
            normalize({"error": "syntax error"})
