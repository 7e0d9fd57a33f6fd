from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

from enrolment_audit.config import AppConfig
from enrolment_audit.errors import AuditError
from enrolment_audit.io.read import load_records
from enrolment_audit.io.schema import Record
from enrolment_audit.pipeline.detect import detect
from enrolment_audit.results import DetectionResult
from enrolment_audit.summary import Summarizer, findings_payload

LOGGER = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class SummaryStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    COMPLETED = "completed"
    ERROR = "error"


class UploadSession:
    """Holds the latest successful upload for one user session.

    A failed upload records a single message in ``error`` and leaves the
    previous records and result in place. ``reset`` discards everything.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        summarizer: Summarizer | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.summarizer = summarizer
        self.status = SessionStatus.IDLE
        self.records: tuple[Record, ...] = ()
        self.result: DetectionResult | None = None
        self.error: str | None = None
        self.summary: Any = None
        self.summary_status = SummaryStatus.IDLE

    def upload(
        self,
        paths: Iterable[Path | str],
        *,
        reference_date: date | None = None,
    ) -> DetectionResult | None:
        self.status = SessionStatus.PROCESSING
        self.error = None
        try:
            records = load_records(paths, self.config)
            result = detect(records, self.config, reference_date=reference_date)
        except AuditError as exc:
            LOGGER.error("Upload failed: %s", exc)
            self.error = str(exc)
            self.status = SessionStatus.ERROR
            return None

        self.records = tuple(records)
        self.result = result
        self.summary = None
        self.summary_status = SummaryStatus.IDLE
        self.status = SessionStatus.COMPLETED
        if result.findings and self.summarizer is not None:
            self.request_summary()
        return result

    def request_summary(self) -> Any:
        """Send the current findings to the summarizer; failures only mark the summary."""
        if self.result is None or self.summarizer is None or not self.result.findings:
            return None
        self.summary_status = SummaryStatus.LOADING
        payload = findings_payload(
            self.result.findings,
            self.result.stats,
            max_findings=self.config.outputs.summary_max_findings,
        )
        try:
            self.summary = self.summarizer.summarize(payload)
        except Exception:
            LOGGER.exception("Summarization failed")
            self.summary_status = SummaryStatus.ERROR
            return None
        self.summary_status = SummaryStatus.COMPLETED
        return self.summary

    def reset(self) -> None:
        self.status = SessionStatus.IDLE
        self.records = ()
        self.result = None
        self.error = None
        self.summary = None
        self.summary_status = SummaryStatus.IDLE
