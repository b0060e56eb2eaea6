import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from records import PatientRecord

logger = logging.getLogger(__name__)


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED_NO_FORMULA = "skipped_no_formula"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    patient: PatientRecord
    status: OutcomeStatus
    reason: str | None = None
    error_code: str | None = None
    artifact_path: Path | None = None


@dataclass(frozen=True)
class RunSummary:
    total: int
    succeeded: int
    skipped: int
    failed: int
    download_dir: Path | None = None


class RunReport:
    """Ordered, append-only log of per-patient outcomes."""

    def __init__(self, download_dir: Path | None = None):
        self.download_dir = download_dir
        self._outcomes: list[Outcome] = []

    def record(self, outcome: Outcome):
        self._outcomes.append(outcome)

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        return tuple(self._outcomes)

    def __len__(self):
        return len(self._outcomes)

    def summarize(self) -> RunSummary:
        counts = {status: 0 for status in OutcomeStatus}
        for outcome in self._outcomes:
            counts[outcome.status] += 1
        return RunSummary(
            total=len(self._outcomes),
            succeeded=counts[OutcomeStatus.SUCCESS],
            skipped=counts[OutcomeStatus.SKIPPED_NO_FORMULA],
            failed=counts[OutcomeStatus.FAILED],
            download_dir=Path(self.download_dir).resolve() if self.download_dir else None,
        )

    def log_summary(self) -> RunSummary:
        summary = self.summarize()
        logger.info("%s", "=" * 70)
        logger.info("PRESCRIPTION SUMMARY")
        logger.info("Total: %d  |  Success: %d  |  Skipped: %d  |  Failed: %d",
                    summary.total, summary.succeeded, summary.skipped, summary.failed)
        problems = [o for o in self._outcomes if o.status is not OutcomeStatus.SUCCESS]
        if problems:
            logger.info("NOT GENERATED:")
            for o in problems:
                reason = o.reason or "Unknown"
                logger.error("  Row %s (%s): %s — %s%s", o.patient.row, o.patient.label, o.status.value,
                             reason[:300], "..." if len(reason) > 300 else "")
        if summary.download_dir:
            logger.info("Prescriptions saved in: %s", summary.download_dir)
        logger.info("%s", "=" * 70)
        return summary
