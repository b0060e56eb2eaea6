import logging
from pathlib import Path
from typing import Sequence

from client import get_browser_page
from config import DOWNLOAD_DIR, DOWNLOAD_PRESCRIPTIONS, RCTA_URL
from console import Console
from pipeline import PrescriptionPipeline
from records import FormulaRecord, PatientRecord, load_records
from report import RunReport, RunSummary
from session import Credentials, open_session

logger = logging.getLogger(__name__)


def collect_inputs(console: Console, patients_path=None, formulas_path=None):
    """Prompt for the spreadsheets, load them, then prompt for credentials.

    Runs before the event loop starts so Ctrl+C at the password prompt
    reaches the console directly. A bad spreadsheet raises SourceUnreadable
    before any credential is asked for.
    """
    logger.info("Starting prescription generation")
    patients_path = patients_path or console.ask("Patients Excel file path: ")
    formulas_path = formulas_path or console.ask("Formulas Excel file path: ")

    logger.info("Reading spreadsheets")
    patients, formulas = load_records(patients_path, formulas_path)
    logger.info("Found %d patients and %d formulas", len(patients), len(formulas))

    username = console.ask("RCTA username: ")
    password = console.ask_secret("RCTA password: ")
    return patients, formulas, Credentials(username, password)


async def run_prescriptions(
    patients: Sequence[PatientRecord],
    formulas: Sequence[FormulaRecord],
    credentials: Credentials,
    *,
    download: bool = DOWNLOAD_PRESCRIPTIONS,
    download_dir: Path = DOWNLOAD_DIR,
    login_url: str = RCTA_URL,
    browser_factory=get_browser_page,
    **pipeline_options,
) -> RunSummary:
    """Log in once and generate a prescription per patient.

    Raises AuthenticationFailed; per-patient problems end up in the
    returned summary instead.
    """
    download_dir = Path(download_dir)
    if download:
        download_dir.mkdir(parents=True, exist_ok=True)
    report = RunReport(download_dir if download else None)

    async with open_session(credentials, login_url, browser_factory=browser_factory) as handle:
        pipeline = PrescriptionPipeline(
            handle,
            formulas,
            form_url=login_url,
            download=download,
            download_dir=download_dir,
            **pipeline_options,
        )
        logger.info("Generating prescriptions")
        await pipeline.run(patients, report)

    summary = report.log_summary()
    logger.info("Done")
    return summary
