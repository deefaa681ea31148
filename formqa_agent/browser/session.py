import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from playwright.async_api import Page

from formqa_agent.browser.config import DEFAULT_CONFIG
from formqa_agent.browser.driver import Driver


class BrowserSession:
    """One isolated browser for one test: its own context, cookies and page."""

    def __init__(self, session_id: str = None, browser_config: Dict[str, Any] = None, timeout_ms: int = 30000):
        self.session_id = session_id or str(uuid.uuid4())
        self.browser_config = {**DEFAULT_CONFIG, **(browser_config or {})}
        self.timeout_ms = timeout_ms
        self.driver: Optional[Driver] = None
        self._is_closed = False
        self._lock = asyncio.Lock()

    async def initialize(self):
        async with self._lock:
            if self._is_closed:
                raise RuntimeError("Browser session is closed")

            logging.debug(f"Initializing browser session {self.session_id} with config: {self.browser_config}")
            try:
                self.driver = await Driver.getInstance(browser_config=self.browser_config)
                self.driver.get_page().set_default_timeout(self.timeout_ms)
                logging.debug(f"Browser session {self.session_id} initialized")
            except Exception as e:
                logging.error(f"Failed to initialize browser session {self.session_id}: {e}")
                await self._cleanup()
                raise

    def get_page(self) -> Page:
        if self._is_closed or not self.driver:
            raise RuntimeError("Browser session not initialized or closed")
        return self.driver.get_page()

    async def reset(self):
        """Start over with an empty browser context so the next walk begins a new form session."""
        if self._is_closed or not self.driver:
            raise RuntimeError("Browser session not initialized or closed")
        page = await self.driver.reset_context()
        page.set_default_timeout(self.timeout_ms)

    def form_driver(self):
        """A FormDriver bound to this session's page."""
        from formqa_agent.actions.action_handler import PlaywrightFormDriver

        return PlaywrightFormDriver(self.get_page(), timeout_ms=self.timeout_ms)

    def is_closed(self) -> bool:
        return self._is_closed

    async def _cleanup(self):
        try:
            if self.driver and not self.driver.is_closed():
                await self.driver.close_browser()
        except Exception as e:
            logging.error(f"Error during cleanup: {e}")
        finally:
            self.driver = None

    async def close(self):
        async with self._lock:
            if self._is_closed:
                return
            logging.debug(f"Closing browser session {self.session_id}")
            self._is_closed = True
            await self._cleanup()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
