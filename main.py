"""
Bulk prescription generator for RCTA.

Reads a patients spreadsheet and a formulas spreadsheet, logs into RCTA with
Playwright and fills one prescription per patient, optionally downloading
each generated PDF.

Usage:
    python main.py
    python main.py --patients pacientes.xlsx --formulas formulas.xlsx
    python main.py --no-download
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from config import DOWNLOAD_DIR, DOWNLOAD_PRESCRIPTIONS, configure_logging, validate_config
from console import Console
from errors import PrescriptionRunError
from orchestrator import collect_inputs, run_prescriptions

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate RCTA prescriptions from Excel files")
    parser.add_argument("--patients", help="Patients spreadsheet (prompted if omitted)")
    parser.add_argument("--formulas", help="Formulas spreadsheet (prompted if omitted)")
    parser.add_argument("--download-dir", type=Path, default=DOWNLOAD_DIR,
                        help=f"Where downloaded prescriptions are saved (default: {DOWNLOAD_DIR})")
    parser.add_argument("--no-download", dest="download", action="store_false", default=DOWNLOAD_PRESCRIPTIONS,
                        help="Generate prescriptions without downloading the PDFs")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()
    validate_config()

    with Console() as console:
        try:
            patients, formulas, credentials = collect_inputs(console, args.patients, args.formulas)
            asyncio.run(run_prescriptions(
                patients,
                formulas,
                credentials,
                download=args.download,
                download_dir=args.download_dir,
            ))
        except PrescriptionRunError as e:
            logger.error("Run aborted [%s]: %s", e.code, e)
            return 1
        except KeyboardInterrupt:
            logger.warning("Interrupted")
            return 130
        except Exception as e:
            logger.exception("General error: %s", e)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
