"""Run report collection for gkedeploy."""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class RunReport:
    """Collects stage outcomes for the end-of-run summary and optional JSON export."""

    def __init__(self, logger, report_file: Optional[str] = None):
        self.logger = logger
        self.report_file = report_file
        self.report: Dict[str, Any] = {
            "operation": None,
            "status": "running",
            "started_at": None,
            "finished_at": None,
            "duration_seconds": None,
            "metadata": {},
            "stages": [],
            "error": None,
        }

    @property
    def stages(self) -> List[Dict[str, Any]]:
        return self.report["stages"]

    def start_run(self, operation: str, metadata: Optional[Dict[str, Any]] = None):
        self.report["operation"] = operation
        self.report["status"] = "running"
        self.report["started_at"] = self._now()
        self.report["metadata"] = metadata or {}

    def set_metadata(self, **values: Any):
        self.report["metadata"].update(values)

    def stage_skipped(self, stage_name: str):
        now = self._now()
        self.stages.append(
            {
                "name": stage_name,
                "status": "skipped",
                "started_at": now,
                "finished_at": now,
                "duration_seconds": None,
                "error": None,
            }
        )

    def stage_started(self, stage_name: str):
        self.stages.append(
            {
                "name": stage_name,
                "status": "running",
                "started_at": self._now(),
                "finished_at": None,
                "duration_seconds": None,
                "error": None,
            }
        )

    def stage_finished(self, stage_name: str, status: str, error: Optional[str] = None):
        for stage in reversed(self.stages):
            if stage["name"] == stage_name and stage["status"] == "running":
                stage["status"] = status
                stage["finished_at"] = self._now()
                stage["error"] = error
                started_at = datetime.fromisoformat(stage["started_at"])
                finished_at = datetime.fromisoformat(stage["finished_at"])
                stage["duration_seconds"] = (finished_at - started_at).total_seconds()
                break

    def finalize(self, status: str, error: Optional[str] = None):
        self.report["status"] = status
        self.report["finished_at"] = self._now()
        if self.report.get("started_at"):
            started_at = datetime.fromisoformat(self.report["started_at"])
            finished_at = datetime.fromisoformat(self.report["finished_at"])
            self.report["duration_seconds"] = (finished_at - started_at).total_seconds()
        self.report["error"] = error
        if self.report_file:
            self.write()

    def write(self):
        os.makedirs(os.path.dirname(os.path.abspath(self.report_file)), exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            prefix="gkedeploy-report-",
            suffix=".json",
            dir=os.path.dirname(os.path.abspath(self.report_file)),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                json.dump(self.report, file_obj, indent=2, sort_keys=True)
                file_obj.write("\n")
            os.replace(temp_path, self.report_file)
        except OSError as exc:
            self.logger.warning("Could not write report file '%s': %s", self.report_file, exc)
            try:
                os.remove(temp_path)
            except OSError:
                pass

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()
