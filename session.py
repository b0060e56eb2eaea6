import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from playwright.async_api import Page

from client import get_browser_page
from config import RCTA_URL
from errors import AuthenticationFailed
from navigation import submit_login

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


class SessionHandle:
    """One authenticated page on the remote site. Unusable once closed."""

    def __init__(self, page: Page):
        self._page = page
        self.active = True

    @property
    def page(self) -> Page:
        if not self.active:
            raise RuntimeError("Browser session not active. Authenticate first.")
        return self._page


def is_login_location(url: str, login_url: str = RCTA_URL) -> bool:
    # The site gives no explicit success flag; staying on the login surface means failure.
    return "login" in url.lower() or url.rstrip("/") == login_url.rstrip("/")


async def authenticate(page: Page, credentials: Credentials, login_url: str = RCTA_URL) -> SessionHandle:
    logger.info("Logging in as %s", credentials.username)
    current_url = await submit_login(page, login_url, credentials.username, credentials.password)
    if is_login_location(current_url, login_url):
        raise AuthenticationFailed("Login failed. Check the username and password.")
    logger.info("Logged in successfully")
    return SessionHandle(page)


async def close(handle: SessionHandle):
    if not handle.active:
        return
    handle.active = False
    logger.info("Session closed")


@asynccontextmanager
async def open_session(credentials: Credentials, login_url: str = RCTA_URL, browser_factory=get_browser_page):
    async with browser_factory() as page:
        handle = await authenticate(page, credentials, login_url)
        try:
            yield handle
        finally:
            await close(handle)
