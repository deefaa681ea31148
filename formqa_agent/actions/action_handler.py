import logging
import re
from typing import Any

from playwright.async_api import Locator, Page

from formqa_agent.controllers.base import Selector

CONTINUE_BUTTON = "Continue"
ERROR_SUMMARY_TEXT = "There is a problem"


class PlaywrightFormDriver:
    """FormDriver on a Playwright page, locating elements by role, label or CSS."""

    def __init__(self, page: Page, timeout_ms: int = 30000):
        self.page = page
        self.timeout_ms = timeout_ms

    def locate(self, selector: Selector) -> Locator:
        if selector.css:
            return self.page.locator(selector.css)
        if selector.role:
            if selector.name:
                return self.page.get_by_role(selector.role, name=selector.name, exact=selector.exact)
            return self.page.get_by_role(selector.role)
        if selector.label:
            return self.page.get_by_label(selector.label, exact=selector.exact)
        raise ValueError(f"Selector has nothing to locate by: {selector}")

    def _choices(self, selector: Selector, kind: str) -> Locator:
        # fieldsets without a legend fall back to page-wide options
        if selector.role == "group" and selector.name:
            return self.locate(selector).get_by_role(kind)
        return self.page.get_by_role(kind)

    async def navigate(self, url: str) -> None:
        logging.debug(f"Navigating to: {url}")
        await self.page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        await self.wait_for_ready()

    async def current_url(self) -> str:
        return self.page.url

    async def fill_field(self, selector: Selector, value: Any) -> bool:
        try:
            await self.locate(selector).fill(str(value))
            logging.debug(f"Typed '{value}' into {selector.describe()}")
            return True
        except Exception as e:
            logging.error(f"Failed to fill {selector.describe()}: {e}")
            return False

    async def select_choice(self, selector: Selector, value: str, kind: str = "radio") -> bool:
        try:
            if kind == "select":
                await self.locate(selector).select_option(label=value)
            elif kind == "autocomplete":
                await self.locate(selector).fill(value)
                await self.page.locator(selector.options_css).get_by_role("option", name=value).click()
            elif selector.role == "group" and selector.name:
                await self.locate(selector).get_by_role(kind, name=value, exact=True).check()
            else:
                await self.page.get_by_role(kind, name=value, exact=True).check()
            logging.debug(f"Selected '{value}' in {selector.describe()}")
            return True
        except Exception as e:
            logging.error(f"Failed to select '{value}' in {selector.describe()}: {e}")
            return False

    async def select_first(self, selector: Selector, kind: str = "radio") -> bool:
        try:
            if kind == "select":
                # index 0 is usually the empty placeholder
                options = await self.locate(selector).locator("option").count()
                await self.locate(selector).select_option(index=1 if options > 1 else 0)
            elif kind == "autocomplete":
                await self.locate(selector).click()
                await self.page.locator(f'{selector.options_css} [role="option"]').first.click()
            else:
                await self._choices(selector, kind).first.check()
            logging.debug(f"Selected first option in {selector.describe()}")
            return True
        except Exception as e:
            logging.error(f"Failed to select first option in {selector.describe()}: {e}")
            return False

    async def check(self, selector: Selector) -> bool:
        try:
            await self.locate(selector).check()
            return True
        except Exception as e:
            logging.error(f"Failed to check {selector.describe()}: {e}")
            return False

    async def upload_file(self, selector: Selector, file_name: str, mime_type: str) -> bool:
        try:
            payload = {"name": file_name, "mimeType": mime_type, "buffer": b"formqa test upload\n"}
            await self.locate(selector).set_input_files(payload)
            logging.debug(f"Attached {file_name} ({mime_type}) to {selector.describe()}")
            return True
        except Exception as e:
            logging.error(f"File upload to {selector.describe()} failed: {e}")
            return False

    async def click_button(self, name: str) -> bool:
        try:
            await self.page.get_by_role("button", name=re.compile(f"^{re.escape(name)}$", re.IGNORECASE)).first.click()
            await self.wait_for_ready()
            return True
        except Exception as e:
            logging.error(f"Failed to click button '{name}': {e}")
            return False

    async def submit(self) -> bool:
        return await self.click_button(CONTINUE_BUTTON)

    async def wait_for_ready(self) -> None:
        await self.page.wait_for_load_state("networkidle", timeout=self.timeout_ms)

    async def count_buttons(self, name: str) -> int:
        return await self.page.get_by_role("button", name=re.compile(re.escape(name), re.IGNORECASE)).count()

    async def error_summary_count(self) -> int:
        return await self.page.get_by_role("alert").filter(has_text=ERROR_SUMMARY_TEXT).count()
