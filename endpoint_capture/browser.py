"""
Browser Module

Starts a Playwright Chromium browser with a single page and closes it again,
including when the run is interrupted.
"""

from typing import Optional

from playwright.async_api import async_playwright

from .errors import BrowserError


VIEWPORT = {"width": 1440, "height": 900}


class BrowserSession:
    """Async context manager owning the Playwright browser, context and page."""

    def __init__(self, headless: bool = True, verbose: bool = False):
        self.headless = headless
        self.verbose = verbose
        self._playwright = None
        self._browser = None
        self._context = None
        self.page = None

    async def __aenter__(self):
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
            self._context = await self._browser.new_context(
                viewport=VIEWPORT, ignore_https_errors=True
            )
            self.page = await self._context.new_page()
        except Exception as e:
            await self.close()
            raise BrowserError(f"Failed to start browser: {e}")

        if self.verbose:
            mode = "headless" if self.headless else "headed"
            print(f"🌐 Browser started ({mode})")
        return self.page

    async def __aexit__(self, exc_type, exc, tb) -> Optional[bool]:
        await self.close()
        return None

    async def close(self) -> None:
        """Close page, context, browser and driver; each step best effort."""
        for resource in (self.page, self._context, self._browser):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                if self.verbose:
                    print(f"⚠️  Error while closing browser resource: {e}")
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                if self.verbose:
                    print(f"⚠️  Error while stopping Playwright: {e}")

        self.page = self._context = self._browser = self._playwright = None
        if self.verbose:
            print("🌐 Browser closed")
