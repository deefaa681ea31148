import asyncio
import logging

from playwright.async_api import async_playwright


class Driver:
    # Serializes browser launches from concurrent coroutines
    __lock = asyncio.Lock()

    @staticmethod
    async def getInstance(browser_config, *args, **kwargs):
        """Launch a new browser and return the Driver owning it.

        Args:
            browser_config (dict): Browser configuration options.
        """
        logging.debug(f"Driver.getInstance called with browser_config: {browser_config}")
        async with Driver.__lock:
            driver = Driver(browser_config=browser_config)
            await driver.create_browser(browser_config=browser_config)
            return driver

    def __init__(self, browser_config=None, *args, **kwargs):
        self._is_closed = False
        self.page = None
        self.browser = None
        self.context = None
        self.playwright = None
        self.config = browser_config

    def is_closed(self):
        """Check if the browser instance is closed."""
        return getattr(self, "_is_closed", True)

    async def create_browser(self, browser_config):
        """Launch Chromium and open a page.

        Args:
            browser_config (dict): Browser configuration containing:
                - headless (bool): Whether to run browser in headless mode
                - viewport (dict): Viewport width and height
                - language (str): Browser locale

        Returns:
            Page: The new page.
        """
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=browser_config["headless"],
                args=[
                    "--disable-dev-shm-usage",  # Mitigate shared memory issues in Docker
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--disable-gpu",
                    f'--window-size={browser_config["viewport"]["width"]},{browser_config["viewport"]["height"]}',
                ],
            )

            self.config = browser_config
            await self._open_context()

            logging.debug(f"Browser instance created successfully with config: {browser_config}")
            return self.page

        except Exception as e:
            logging.error("Failed to create browser instance.", exc_info=True)
            raise e

    async def _open_context(self):
        viewport = self.config["viewport"]
        self.context = await self.browser.new_context(
            viewport={"width": viewport["width"], "height": viewport["height"]},
            locale=self.config["language"],
        )
        self.page = await self.context.new_page()
        return self.page

    async def reset_context(self):
        """Replace the context with a fresh one, dropping cookies and form session state."""
        if self.context is not None:
            await self.context.close()
        page = await self._open_context()
        logging.debug("Browser context reset")
        return page

    def get_context(self):
        return self.context

    def get_page(self):
        """Returns the current page instance."""
        return self.page

    async def close_browser(self):
        """Closes the browser instance and stops Playwright."""
        try:
            if not self.is_closed():
                await self.browser.close()
                await self.playwright.stop()
                self._is_closed = True
                logging.debug("Browser instance closed successfully.")
        except Exception as e:
            logging.error("Failed to close browser instance.", exc_info=True)
            raise e
