import os
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

RCTA_URL = os.environ.get("RCTA_URL", "https://app.rcta.me/AddPrescription")
HEADLESS = os.environ.get("HEADLESS", "false").lower() == "true"
USE_AGENTCORE = os.environ.get("USE_AGENTCORE", "false").lower() == "true"
AWS_REGION = os.environ.get("AWS_REGION", "us-west-2")
BROWSER_ID = os.environ.get("BROWSER_ID", "")

DOWNLOAD_PRESCRIPTIONS = os.environ.get("DOWNLOAD_PRESCRIPTIONS", "true").lower() == "true"
DOWNLOAD_DIR = Path(os.environ.get("DOWNLOAD_DIR", "./recetas-generadas"))

GENERATION_TIMEOUT_MS = int(os.environ.get("GENERATION_TIMEOUT_MS", "30000"))
DOWNLOAD_SETTLE_MS = int(os.environ.get("DOWNLOAD_SETTLE_MS", "3000"))
PATIENT_PACING_MS = int(os.environ.get("PATIENT_PACING_MS", "1000"))
# 0 disables Playwright's default 30s bound on every other remote wait.
REMOTE_WAIT_TIMEOUT_MS = int(os.environ.get("REMOTE_WAIT_TIMEOUT_MS", "0"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def validate_config():
    if USE_AGENTCORE and not BROWSER_ID:
        raise ValueError("BROWSER_ID is not configured. Set the BROWSER_ID environment variable.")
    for name, value in (
        ("GENERATION_TIMEOUT_MS", GENERATION_TIMEOUT_MS),
        ("DOWNLOAD_SETTLE_MS", DOWNLOAD_SETTLE_MS),
        ("PATIENT_PACING_MS", PATIENT_PACING_MS),
        ("REMOTE_WAIT_TIMEOUT_MS", REMOTE_WAIT_TIMEOUT_MS),
    ):
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
    logger.debug("Config validated (url=%s, agentcore=%s)", RCTA_URL, USE_AGENTCORE)


def configure_logging(level: str = LOG_LEVEL):
    logging.basicConfig(level=level, format=LOG_FORMAT)
