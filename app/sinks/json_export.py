"""Static JSON export of a run's notices.

Output layout under the export directory:

- notices.json: every notice, highest score first
- healthcare_notices.json: notices that pass the healthcare filter
- states.json: notice count per jurisdiction the run covered
- by-state/{XX}.json: one file per jurisdiction with notices
- metadata.json: timestamp, counts, failed jurisdictions and run id
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from app.domain.models import NormalizedNotice
from app.logging import get_logger
from app.normalization.enrichment import (
    employer_hierarchy,
    has_silent_signals,
    is_healthcare_notice,
    lead_time_days,
)
from app.pipeline.models import PipelineRunResult
from app.utils.timestamps import format_timestamp, utc_now

from .base import NoticeSink

logger = get_logger(__name__, component="sink")

BY_STATE_DIR = "by-state"


def export_notice(notice: NormalizedNotice) -> Dict[str, Any]:
    """Flatten a notice into the exported record, adding derived fields."""
    facility_name, parent_system, employer_id = employer_hierarchy(notice)
    impact = notice.impact
    return {
        "id": notice.id,
        "state": notice.jurisdiction,
        "employer_name": notice.employer_name,
        "parent_system": parent_system,
        "facility_name": facility_name,
        "employer_id": employer_id,
        "city": notice.city,
        "county": notice.county,
        "address": notice.address,
        "notice_date": notice.notice_date.isoformat() if notice.notice_date else None,
        "effective_date": notice.effective_date.isoformat() if notice.effective_date else None,
        "lead_time_days": lead_time_days(notice),
        "employees_affected": notice.employees_affected,
        "naics": notice.industry_code,
        "reason": notice.reason,
        "raw_text": notice.raw_text,
        "source_name": notice.provenance.provider_name,
        "source_url": notice.provenance.provider_url,
        "source_id": notice.provenance.provider_record_id,
        "attachments": [attachment.model_dump() for attachment in notice.attachments],
        "nursing_score": impact.score if impact else 0,
        "nursing_label": impact.label if impact else "Unclear",
        "nursing_signals": list(impact.signals) if impact else [],
        "nursing_keywords": list(impact.keywords_found) if impact else [],
        "nursing_role_mix": impact.role_mix.model_dump() if impact and impact.role_mix else None,
        "nursing_care_setting": impact.care_setting if impact else None,
        "nursing_specialties": list(impact.specialties) if impact else [],
        "nursing_explanations": list(impact.explanations) if impact else [],
        "silent_signal_flag": has_silent_signals(notice),
        "retrieved_at": format_timestamp(notice.provenance.retrieved_at),
    }


class JsonExportSink(NoticeSink):
    """Writes a run's notices as static JSON files.

    Attributes:
        export_dir: Directory the files are written to (created if missing)
        write_per_state: Whether to write by-state/{XX}.json files
    """

    name = "json_export"

    def __init__(self, export_dir: str, write_per_state: bool = True):
        self.export_dir = Path(export_dir)
        self.write_per_state = write_per_state

    def write(self, result: PipelineRunResult) -> None:
        """Write every export file for the run.

        Raises:
            OSError: If the export directory cannot be written
        """
        self.export_dir.mkdir(parents=True, exist_ok=True)
        last_updated = format_timestamp(utc_now(), include_microseconds=True)

        exported = [export_notice(notice) for notice in result.notices]
        healthcare = [
            record
            for notice, record in zip(result.notices, exported)
            if is_healthcare_notice(notice)
        ]

        self._write_json(
            "notices.json",
            {"notices": exported, "count": len(exported), "lastUpdated": last_updated},
        )
        self._write_json(
            "healthcare_notices.json",
            {"notices": healthcare, "count": len(healthcare), "lastUpdated": last_updated},
        )

        by_state: Dict[str, List[Dict[str, Any]]] = {}
        for record in exported:
            by_state.setdefault(record["state"], []).append(record)

        # Covered jurisdictions appear with 0 when they produced nothing
        counts = {stats.jurisdiction: 0 for stats in result.adapter_stats}
        counts.update({state: len(records) for state, records in by_state.items()})
        self._write_json(
            "states.json",
            {
                "states": [{"state": state, "count": count} for state, count in sorted(counts.items())],
                "lastUpdated": last_updated,
            },
        )

        if self.write_per_state:
            for state, records in sorted(by_state.items()):
                self._write_json(
                    f"{BY_STATE_DIR}/{state}.json",
                    {"state": state, "notices": records, "count": len(records), "lastUpdated": last_updated},
                )

        self._write_json(
            "metadata.json",
            {
                "lastUpdated": last_updated,
                "totalNotices": len(exported),
                "healthcareNotices": len(healthcare),
                "statesWithData": len(by_state),
                "statesFailed": result.failed_jurisdictions,
                "fetchDuration": int(result.total_duration_seconds * 1000),
                "runId": result.run_id,
            },
        )

        logger.info(
            f"Exported {len(exported)} notice(s) to {self.export_dir}",
            extra={
                "event": "sink.json.written",
                "export_dir": str(self.export_dir),
                "notice_count": len(exported),
                "healthcare_count": len(healthcare),
                "state_files": len(by_state) if self.write_per_state else 0,
            },
        )

    def _write_json(self, relative_path: str, payload: Dict[str, Any]) -> None:
        """Write one file atomically (temp file, then rename)."""
        target = self.export_dir / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(target)
        logger.debug(f"Written: {target}", extra={"event": "sink.json.file_written"})
