import logging
from pathlib import Path

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from errors import GenerationTimeout, RemoteInteractionError

logger = logging.getLogger(__name__)

# Login surface
USERNAME_INPUT = "#username"
PASSWORD_INPUT = "#password"
LOGIN_BUTTON = "#login-button"

# Patient search modal
SEARCH_PATIENT_BUTTON = "#buscar-paciente-btn"
SEARCH_MODAL = "#modal-buscar-paciente"
SEARCH_INPUT = "#input-buscar-paciente"
SEARCH_SUBMIT = "#btn-buscar"
SEARCH_RESULTS = "#resultado-busqueda"
FIRST_RESULT_ROW = "#tabla-resultados tr:first-child"
PATIENT_DATA_LOADED = "#datos-paciente-cargados"

# Prescription form
PRESCRIPTION_TYPE_SELECT = "#tipo-receta"
DEFAULT_COVERAGE = "#cobertura-hominis"
FREE_TEXT_TAB = "#tab-texto-libre"
FREE_TEXT_FIELD = "#campo-texto-libre"
GENERATE_BUTTON = "#btn-generar-prescripcion"
GENERATED_SIGNAL = "#receta-generada"
DOWNLOAD_BUTTON = "#btn-descargar-pdf"


async def submit_login(page: Page, login_url: str, username: str, password: str):
    logger.info("Navigating to login page: %s", login_url)
    await page.goto(login_url, wait_until="networkidle")
    await page.fill(USERNAME_INPUT, username)
    await page.fill(PASSWORD_INPUT, password)
    async with page.expect_navigation(wait_until="networkidle"):
        await page.click(LOGIN_BUTTON)
    logger.info("  Current URL after login: %s", page.url)
    return page.url


async def open_prescription_form(page: Page, form_url: str):
    await page.goto(form_url, wait_until="networkidle")
    logger.debug("  Opened prescription form: %s", page.url)


async def search_patient(page: Page, query: str):
    await page.click(SEARCH_PATIENT_BUTTON)
    await page.wait_for_selector(SEARCH_MODAL)
    await page.fill(SEARCH_INPUT, query)
    await page.click(SEARCH_SUBMIT)
    try:
        await page.wait_for_selector(SEARCH_RESULTS)
    except PlaywrightTimeoutError as e:
        raise RemoteInteractionError(f"No search results for patient '{query}'") from e
    try:
        await page.click(FIRST_RESULT_ROW)
        await page.wait_for_selector(PATIENT_DATA_LOADED, state="visible")
    except PlaywrightTimeoutError as e:
        raise RemoteInteractionError(f"Could not select patient '{query}': {e}") from e
    logger.info("  Selected patient: %s", query)


async def select_prescription_type(page: Page, prescription_type: str):
    await page.select_option(PRESCRIPTION_TYPE_SELECT, value=prescription_type)
    logger.info("  Selected prescription type: %s", prescription_type)


async def select_default_coverage(page: Page):
    await page.click(DEFAULT_COVERAGE)


async def enter_free_text(page: Page, text: str):
    await page.click(FREE_TEXT_TAB)
    await page.fill(FREE_TEXT_FIELD, "")
    await page.fill(FREE_TEXT_FIELD, text)
    logger.info("  Prescription text: %s", text)


async def generate_prescription(page: Page, timeout_ms: int):
    await page.click(GENERATE_BUTTON)
    try:
        await page.wait_for_selector(GENERATED_SIGNAL, state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise GenerationTimeout(f"Prescription was not generated within {timeout_ms} ms") from e


async def download_prescription(page: Page, download_dir: Path, settle_ms: int) -> Path:
    """Click the PDF button and save the file under the name the site chose."""
    async with page.expect_download() as download_info:
        await page.click(DOWNLOAD_BUTTON)
    download = await download_info.value
    target = Path(download_dir) / download.suggested_filename
    await download.save_as(target)
    await page.wait_for_timeout(settle_ms)
    logger.info("  Saved prescription to %s", target)
    return target
