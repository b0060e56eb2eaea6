import asyncio
import logging
from pathlib import Path
from typing import Sequence

import navigation
from config import (
    DOWNLOAD_DIR,
    DOWNLOAD_PRESCRIPTIONS,
    DOWNLOAD_SETTLE_MS,
    GENERATION_TIMEOUT_MS,
    PATIENT_PACING_MS,
    RCTA_URL,
)
from errors import PrescriptionRunError, RemoteInteractionError
from records import FormulaRecord, PatientRecord, resolve_formula
from report import Outcome, OutcomeStatus, RunReport
from session import SessionHandle

logger = logging.getLogger(__name__)


def compose_prescription_text(formula: FormulaRecord, patient: PatientRecord) -> str:
    """Build the free-text body: ``"<detail> X<quantity>"`` plus ``" <vials>)"`` when vials > 0.

    The closing parenthesis without an opening one is what the site's
    operators expect and is kept as-is.
    """
    if formula.detail_text is None:
        raise ValueError(f"Formula {formula.id!r} has no Detalle text")
    if patient.quantity is None:
        raise ValueError(f"Patient {patient.label} has no Cantidad_comp")
    text = f"{formula.detail_text} X{patient.quantity}"
    if patient.vial_count is not None and patient.vial_count > 0:
        text += f" {patient.vial_count})"
    return text


class PrescriptionPipeline:
    def __init__(
        self,
        handle: SessionHandle,
        formulas: Sequence[FormulaRecord],
        *,
        form_url: str = RCTA_URL,
        download: bool = DOWNLOAD_PRESCRIPTIONS,
        download_dir: Path = DOWNLOAD_DIR,
        generation_timeout_ms: int = GENERATION_TIMEOUT_MS,
        download_settle_ms: int = DOWNLOAD_SETTLE_MS,
        pacing_ms: int = PATIENT_PACING_MS,
    ):
        self.handle = handle
        self.formulas = formulas
        self.form_url = form_url
        self.download = download
        self.download_dir = Path(download_dir)
        self.generation_timeout_ms = generation_timeout_ms
        self.download_settle_ms = download_settle_ms
        self.pacing_ms = pacing_ms

    async def _prepare_form(self, patient: PatientRecord):
        page = self.handle.page
        if patient.name is None:
            raise RemoteInteractionError(f"Row {patient.row} has no Paciente to search for")
        await navigation.open_prescription_form(page, self.form_url)
        await navigation.search_patient(page, str(patient.name))
        if patient.prescription_type:
            await navigation.select_prescription_type(page, patient.prescription_type)
        await navigation.select_default_coverage(page)

    async def _submit(self, text: str) -> Path | None:
        page = self.handle.page
        await navigation.enter_free_text(page, text)
        await navigation.generate_prescription(page, self.generation_timeout_ms)
        if not self.download:
            return None
        return await navigation.download_prescription(page, self.download_dir, self.download_settle_ms)

    async def process(self, patient: PatientRecord) -> Outcome:
        """Drive one patient to an outcome. Only fatal run errors escape."""
        try:
            await self._prepare_form(patient)

            formula = resolve_formula(self.formulas, patient.formula_ref)
            if formula is None:
                logger.warning("  No formula %r for %s. Skipping...", patient.formula_ref, patient.label)
                return Outcome(patient, OutcomeStatus.SKIPPED_NO_FORMULA,
                               reason=f"No formula with id {patient.formula_ref!r}")

            text = compose_prescription_text(formula, patient)
            artifact = await self._submit(text)
        except PrescriptionRunError as e:
            if e.fatal:
                raise
            logger.error("  Error generating prescription for %s: %s", patient.label, e)
            return Outcome(patient, OutcomeStatus.FAILED, reason=str(e), error_code=e.code)
        except Exception as e:
            logger.error("  Error generating prescription for %s: %s", patient.label, e)
            return Outcome(patient, OutcomeStatus.FAILED, reason=str(e) or type(e).__name__,
                           error_code=RemoteInteractionError.code)

        logger.info("  Prescription generated for %s - %s", patient.label, patient.prescription_type or "Principal")
        return Outcome(patient, OutcomeStatus.SUCCESS, artifact_path=artifact)

    async def run(self, patients: Sequence[PatientRecord], report: RunReport) -> RunReport:
        total = len(patients)
        for i, patient in enumerate(patients, 1):
            logger.info("%s", "─" * 80)
            logger.info("Patient %d/%d: %s", i, total, patient.label)
            report.record(await self.process(patient))
            if i < total and self.pacing_ms:
                await asyncio.sleep(self.pacing_ms / 1000)
        return report
