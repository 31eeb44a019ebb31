import asyncio
import logging

from playwright.async_api import async_playwright


class Driver:
    # creation is serialized; each call still gets its own browser
    __lock = asyncio.Lock()

    @staticmethod
    async def getInstance(browser_config, *args, **kwargs):
        """Create a new Driver with a launched browser, context and page.

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
        return getattr(self, "_is_closed", True)

    async def create_browser(self, browser_config):
        """Launch Chromium and open an isolated context and page.

        Args:
            browser_config (dict): Browser configuration containing:
                - headless (bool): Whether to run browser in headless mode
                - viewport (dict): width and height of the viewport
                - language (str): Context locale
                - base_url (str): Base for relative navigations
                - navigation_timeout (int): Default navigation timeout in ms
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

            context_options = {
                "viewport": {"width": browser_config["viewport"]["width"], "height": browser_config["viewport"]["height"]},
                "locale": browser_config["language"],
            }
            if browser_config.get("base_url"):
                context_options["base_url"] = browser_config["base_url"]
            self.context = await self.browser.new_context(**context_options)
            self.context.set_default_navigation_timeout(browser_config["navigation_timeout"])

            self.page = await self.context.new_page()
            self.config = browser_config

            logging.debug(f"Browser instance created successfully with config: {browser_config}")
            return self.page

        except Exception:
            logging.error("Failed to create browser instance.", exc_info=True)
            raise

    def get_page(self):
        return self.page

    async def close_browser(self):
        """Closes the browser instance and stops Playwright."""
        try:
            if not self.is_closed():
                await self.browser.close()
                await self.playwright.stop()
                self._is_closed = True
                logging.debug("Browser instance closed successfully.")
        except Exception:
            logging.error("Failed to close browser instance.", exc_info=True)
            raise
