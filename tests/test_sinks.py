"""Unit tests for the JSON export and database sinks."""

import json
from datetime import date, datetime, timezone

import pytest

from app.domain.models import Attachment, NormalizedNotice, Provenance
from app.persistence import NoticeRepository, close_database, get_session, init_database
from app.pipeline.models import AdapterRunStats, AdapterStatus, PipelineRunResult
from app.scoring import apply_impact
from app.sinks import DatabaseSink, JsonExportSink, export_notice
from app.utils.hashing import compute_notice_id

STARTED = datetime(2025, 2, 12, 10, 0, tzinfo=timezone.utc)
FINISHED = datetime(2025, 2, 12, 10, 0, 12, 500000, tzinfo=timezone.utc)


def make_notice(employer, jurisdiction="OR", **overrides) -> NormalizedNotice:
    values = {
        "jurisdiction": jurisdiction,
        "employer_name": employer,
        "city": "Portland",
        "notice_date": date(2025, 2, 10),
        "provenance": Provenance(
            provider_name="Oregon WARN",
            provider_url="https://example.gov/warn",
            retrieved_at=STARTED,
        ),
    }
    values.update(overrides)
    values["id"] = compute_notice_id(jurisdiction, employer, values.get("notice_date"), values.get("city"))
    return apply_impact(NormalizedNotice(**values))


@pytest.fixture
def run_result():
    return PipelineRunResult(
        run_id="run-42",
        run_started_at=STARTED,
        run_finished_at=FINISHED,
        notices=[
            make_notice(
                "Mercy Health - St. Vincent Campus",
                industry_code="622110",
                effective_date=date(2025, 4, 11),
                reason="Bed reduction",
                attachments=[Attachment(url="https://example.gov/warn/1.pdf", mime_type="application/pdf")],
            ),
            make_notice("Acme Widgets", employees_affected=40),
            make_notice("Valley Foods", jurisdiction="WA", city="Yakima"),
        ],
        adapter_stats=[
            AdapterRunStats("OR", notice_count=2),
            AdapterRunStats("WA", notice_count=1),
            AdapterRunStats("ID", status=AdapterStatus.EMPTY),
            AdapterRunStats("TX", status=AdapterStatus.TIMEOUT),
        ],
    )


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


# ============================================================================
# export_notice
# ============================================================================


class TestExportNotice:
    """Tests for the exported record shape."""

    def test_derived_fields(self, run_result):
        record = export_notice(run_result.notices[0])

        assert record["state"] == "OR"
        assert record["facility_name"] == "Mercy Health - St. Vincent Campus"
        assert record["parent_system"] == "Mercy Health"
        assert record["employer_id"] == "OR:mercy-health"
        assert record["notice_date"] == "2025-02-10"
        assert record["effective_date"] == "2025-04-11"
        assert record["lead_time_days"] == 60
        assert record["naics"] == "622110"
        assert record["silent_signal_flag"] is True
        assert record["attachments"] == [
            {"url": "https://example.gov/warn/1.pdf", "label": None, "mime_type": "application/pdf"}
        ]
        assert record["retrieved_at"] == "2025-02-12T10:00:00Z"
        assert record["nursing_explanations"] == record["nursing_signals"]

    def test_unscored_notice_defaults(self):
        notice = make_notice("Acme Widgets").model_copy(update={"impact": None})

        record = export_notice(notice)

        assert record["nursing_score"] == 0
        assert record["nursing_label"] == "Unclear"
        assert record["nursing_role_mix"] is None
        assert record["nursing_signals"] == []

    def test_json_serializable(self, run_result):
        for notice in run_result.notices:
            json.dumps(export_notice(notice))


# ============================================================================
# JsonExportSink
# ============================================================================


class TestJsonExportSink:
    """Tests for JsonExportSink."""

    def test_writes_every_file(self, tmp_path, run_result):
        JsonExportSink(str(tmp_path / "out")).write(run_result)

        out = tmp_path / "out"
        notices = read_json(out / "notices.json")
        assert notices["count"] == 3
        assert [n["employer_name"] for n in notices["notices"]] == [
            "Mercy Health - St. Vincent Campus",
            "Acme Widgets",
            "Valley Foods",
        ]
        assert notices["lastUpdated"].endswith("Z")

        healthcare = read_json(out / "healthcare_notices.json")
        assert [n["employer_name"] for n in healthcare["notices"]] == ["Mercy Health - St. Vincent Campus"]

        states = read_json(out / "states.json")
        assert states["states"] == [
            {"state": "ID", "count": 0},
            {"state": "OR", "count": 2},
            {"state": "TX", "count": 0},
            {"state": "WA", "count": 1},
        ]

        oregon = read_json(out / "by-state" / "OR.json")
        assert oregon["state"] == "OR"
        assert oregon["count"] == 2
        assert not (out / "by-state" / "ID.json").exists()

    def test_metadata(self, tmp_path, run_result):
        JsonExportSink(str(tmp_path)).write(run_result)

        metadata = read_json(tmp_path / "metadata.json")

        assert metadata["totalNotices"] == 3
        assert metadata["healthcareNotices"] == 1
        assert metadata["statesWithData"] == 2
        assert metadata["statesFailed"] == ["TX"]
        assert metadata["fetchDuration"] == 12500
        assert metadata["runId"] == "run-42"

    def test_per_state_files_optional(self, tmp_path, run_result):
        JsonExportSink(str(tmp_path), write_per_state=False).write(run_result)

        assert (tmp_path / "notices.json").exists()
        assert not (tmp_path / "by-state").exists()

    def test_no_temp_files_left(self, tmp_path, run_result):
        JsonExportSink(str(tmp_path)).write(run_result)

        assert list(tmp_path.rglob("*.tmp")) == []

    def test_rewrite_replaces_previous_export(self, tmp_path, run_result):
        sink = JsonExportSink(str(tmp_path))
        sink.write(run_result)

        run_result.notices = run_result.notices[:1]
        sink.write(run_result)

        assert read_json(tmp_path / "notices.json")["count"] == 1

    def test_empty_run(self, tmp_path):
        result = PipelineRunResult(run_id="empty", run_started_at=STARTED, run_finished_at=STARTED)

        JsonExportSink(str(tmp_path)).write(result)

        notices = read_json(tmp_path / "notices.json")
        assert (notices["notices"], notices["count"]) == ([], 0)
        assert read_json(tmp_path / "states.json")["states"] == []


# ============================================================================
# DatabaseSink
# ============================================================================


class TestDatabaseSink:
    """Tests for DatabaseSink."""

    def test_upserts_run_notices(self, tmp_path, run_result):
        init_database(f"sqlite:///{tmp_path / 'notices.db'}")
        try:
            sink = DatabaseSink()
            sink.write(run_result)
            sink.write(run_result)

            with get_session() as session:
                repo = NoticeRepository(session)
                assert repo.count() == 3
                assert len(repo.list_by_state("OR")) == 2
        finally:
            close_database()
