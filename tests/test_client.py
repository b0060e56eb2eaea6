import asyncio
import sys
import types
from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import client


def fake_playwright(browser):
    pw = MagicMock()
    pw.chromium.connect_over_cdp = AsyncMock(return_value=browser)
    manager = MagicMock()
    manager.__aenter__ = AsyncMock(return_value=pw)
    manager.__aexit__ = AsyncMock(return_value=False)
    return manager


class TestBedrockBrowser:
    def test_uses_dedicated_context_with_downloads(self):
        page = MagicMock()
        page.close = AsyncMock()
        context = MagicMock()
        context.new_page = AsyncMock(return_value=page)
        context.close = AsyncMock()
        browser = MagicMock()
        browser.contexts = [MagicMock()]
        browser.new_context = AsyncMock(return_value=context)
        browser.close = AsyncMock()

        @contextmanager
        def browser_session(region, identifier=None):
            session = MagicMock()
            session.generate_ws_headers.return_value = ("wss://remote", {"Authorization": "x"})
            yield session

        module = types.ModuleType("bedrock_agentcore.tools.browser_client")
        module.browser_session = browser_session

        async def scenario():
            async with client.get_bedrock_browser("us-west-2", "browser-1") as yielded:
                return yielded

        with patch.dict(sys.modules, {"bedrock_agentcore.tools.browser_client": module}), \
                patch("client.async_playwright", return_value=fake_playwright(browser)):
            yielded = asyncio.run(scenario())

        assert yielded is page
        browser.new_context.assert_awaited_once_with(accept_downloads=True)
        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
