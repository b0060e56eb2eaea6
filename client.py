import logging
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright

from config import AWS_REGION, BROWSER_ID, HEADLESS, REMOTE_WAIT_TIMEOUT_MS, USE_AGENTCORE

logger = logging.getLogger(__name__)


@asynccontextmanager
async def get_bedrock_browser(aws_region: str, browser_id: str):
    from bedrock_agentcore.tools.browser_client import browser_session

    logger.info("Connecting to Bedrock Browser")
    with browser_session(aws_region, identifier=browser_id) as client:
        ws_url, headers = client.generate_ws_headers()
        async with async_playwright() as pw:
            browser = await pw.chromium.connect_over_cdp(ws_url, headers=headers)
            # Fresh context so downloads are accepted.
            context = await browser.new_context(accept_downloads=True)
            page = await context.new_page()
            try:
                yield page
            finally:
                await page.close()
                await context.close()
                await browser.close()
                logger.info("Browser session ended")


@asynccontextmanager
async def get_local_browser(headless: bool = HEADLESS):
    logger.info("Launching local Chromium (headless=%s)", headless)
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=headless, args=["--start-maximized"])
        context = await browser.new_context(accept_downloads=True, no_viewport=True)
        page = await context.new_page()
        try:
            yield page
        finally:
            await page.close()
            await context.close()
            await browser.close()
            logger.info("Browser session ended")


@asynccontextmanager
async def get_browser_page():
    """Yield a Playwright Page from either a local browser or AgentCore."""
    provider = get_bedrock_browser(AWS_REGION, BROWSER_ID) if USE_AGENTCORE else get_local_browser()
    async with provider as page:
        page.set_default_timeout(REMOTE_WAIT_TIMEOUT_MS)
        page.set_default_navigation_timeout(REMOTE_WAIT_TIMEOUT_MS)
        yield page
