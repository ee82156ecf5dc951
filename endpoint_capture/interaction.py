"""
Interaction Module

Exercises the export and print controls of a loaded page so the API calls
behind them are captured. Every step is fail-soft: a missing control, a
failed click or a menu that never opens only leaves a bucket empty.
"""

import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

from .config import TimingPolicy
from .errors import InteractionError
from .models import CapturedCall, ExportPrintResult
from .network_listener import RequestListener


class SelectorChain:
    """Ordered selector candidates tried until one matches."""

    def __init__(self, name: str, candidates: Sequence[str]):
        self.name = name
        self.candidates = tuple(candidates)

    def __repr__(self) -> str:
        return f"SelectorChain({self.name!r}, {list(self.candidates)!r})"

    async def first_match(self, page) -> Optional[Tuple[str, list]]:
        """
        Return the first candidate with at least one element on the page.

        Returns:
            (selector, elements) or None when no candidate matches
        """
        for selector in self.candidates:
            try:
                elements = await page.query_selector_all(selector)
            except Exception:
                continue
            if elements:
                return selector, elements
        return None

    async def wait_for(self, page, timeout: float) -> Optional[str]:
        """Wait up to ``timeout`` seconds per candidate; return the one that appeared."""
        if timeout <= 0:
            # Playwright treats a zero timeout as "wait forever"
            match = await self.first_match(page)
            return match[0] if match else None

        for selector in self.candidates:
            try:
                await page.wait_for_selector(selector, timeout=timeout * 1000, state="visible")
                return selector
            except Exception:
                continue
        return None


EXPORT_BUTTONS = SelectorChain(
    "export button",
    [
        "button.export",
        "[data-testid='table_button_export']",
        "button:has-text('Export')",
    ],
)

PRINT_BUTTONS = SelectorChain(
    "print button",
    [
        "[data-testid='table_button_print']",
        "button.print",
        "button:has-text('Print')",
    ],
)

MENU_CONTAINERS = SelectorChain(
    "export menu",
    [
        "div.p-menuitem-content",
        "[role='menu']",
        ".dropdown-menu.show",
    ],
)

MENU_OPTIONS = SelectorChain(
    "export option",
    [
        "div.p-menuitem-content a",
        "[role='menuitem']",
        ".dropdown-menu.show a",
    ],
)

DIALOG_CANCEL = SelectorChain(
    "dialog cancel",
    [
        "button:has-text('Cancel')",
        ".p-dialog-header-close",
        "[aria-label='Close']",
    ],
)


class ExportPrintDriver:
    """Captures the API calls behind a page's export and print controls."""

    def __init__(
        self,
        page,
        listener: RequestListener,
        timing: Optional[TimingPolicy] = None,
        retries: int = 2,
        wait_for_network_idle: bool = False,
        verbose: bool = False,
    ):
        """
        Initialize the driver.

        Args:
            page: Browser page already navigated by the orchestrator
            listener: Listener dedicated to export/print calls
            timing: Wait and timeout policy
            retries: Attempts at opening the export menu
            wait_for_network_idle: Also wait for network idle after each click
            verbose: Enable verbose logging
        """
        self.page = page
        self.listener = listener
        self.timing = timing or TimingPolicy()
        self.retries = retries
        self.wait_for_network_idle = wait_for_network_idle
        self.verbose = verbose
        self.results: Dict[str, ExportPrintResult] = {}

    async def process_page(self, page_url: str) -> Optional[ExportPrintResult]:
        """
        Run the export and print sequences on the current page.

        Returns:
            ExportPrintResult, or None when the page has neither control
        """
        await asyncio.sleep(self.timing.settle_delay)

        export_match = await EXPORT_BUTTONS.first_match(self.page)
        print_match = await PRINT_BUTTONS.first_match(self.page)

        if export_match is None and print_match is None:
            if self.verbose:
                print("    ℹ️  No export/print controls on this page")
            return None

        result = ExportPrintResult(page_url=page_url)

        if export_match is not None:
            if self.verbose:
                print("    📥 Found export control, capturing export APIs...")
            await self.capture_exports(export_match[0], result)
            await self.close_open_menus()

        if print_match is not None:
            if self.verbose:
                print("    🖨️  Found print control, capturing print APIs...")
            await self.capture_print(print_match[0], result)
            await self.close_open_menus()

        if self.verbose:
            print(
                f"    ✅ Export/print: {len(result.excel)} Excel, "
                f"{len(result.pdf)} PDF, {len(result.print)} print calls"
            )

        self.results[page_url] = result
        return result

    async def capture_exports(self, export_selector: str, result: ExportPrintResult) -> None:
        """Click the first (Excel) and last (PDF) export options in turn."""
        try:
            options = await self.open_export_menu(export_selector)
            result.excel = await self._capture_click(options[0], "Excel")

            if len(options) < 2:
                if self.verbose:
                    print(f"     ⚠️  Expected at least 2 export options, found {len(options)}")
                return

            options = await self.open_export_menu(export_selector)
            result.pdf = await self._capture_click(options[-1], "PDF")
        except Exception as e:
            if self.verbose:
                print(f"     ⚠️  Export capture aborted: {e}")

    async def capture_print(self, print_selector: str, result: ExportPrintResult) -> None:
        """Click the last print control found and dismiss the resulting dialog."""
        try:
            buttons = await self.page.query_selector_all(print_selector)
            if not buttons:
                raise InteractionError(f"Print control vanished: {print_selector}")
            if self.verbose:
                print(f"     🖨️  {len(buttons)} print controls found, clicking the last one")
            result.print = await self._capture_click(buttons[-1], "print")
            await self.dismiss_dialog()
        except Exception as e:
            if self.verbose:
                print(f"     ⚠️  Print capture aborted: {e}")

    async def open_export_menu(self, export_selector: str) -> List:
        """
        Open the export menu and return its options.

        Raises:
            InteractionError: If the menu or its options never appear
        """
        for attempt in range(1, self.retries + 1):
            await self.page.click(export_selector)
            await asyncio.sleep(self.timing.settle_delay)

            menu = await MENU_CONTAINERS.wait_for(self.page, self.timing.interaction_timeout)
            if menu is not None:
                match = await MENU_OPTIONS.first_match(self.page)
                if match is not None:
                    return match[1]

            if self.verbose:
                print(f"     ⚠️  Export menu not ready (attempt {attempt}/{self.retries})")
            await self.close_open_menus()

        raise InteractionError("Export menu did not open")

    async def _capture_click(self, element, label: str) -> List[CapturedCall]:
        if self.verbose:
            print(f"     📊 Capturing {label} APIs...")

        async with self.listener.capture() as session:
            await element.click()
            if self.wait_for_network_idle:
                await self._wait_for_network_idle()
            await asyncio.sleep(self.timing.interaction_window)
        return session.calls

    async def _wait_for_network_idle(self) -> None:
        if self.timing.interaction_timeout <= 0:
            # Playwright treats a zero timeout as "wait forever"
            return
        try:
            await self.page.wait_for_load_state(
                "networkidle", timeout=self.timing.interaction_timeout * 1000
            )
        except Exception as e:
            if self.verbose:
                print(f"     ⚠️  Network did not go idle: {e}")

    async def dismiss_dialog(self) -> None:
        match = await DIALOG_CANCEL.first_match(self.page)
        try:
            if match is not None:
                await match[1][-1].click()
            else:
                await self.page.keyboard.press("Escape")
        except Exception as e:
            if self.verbose:
                print(f"     ⚠️  Could not dismiss dialog: {e}")

    async def close_open_menus(self) -> None:
        """Press Escape and click the page body; failures are ignored."""
        try:
            await self.page.keyboard.press("Escape")
            await asyncio.sleep(self.timing.cleanup_delay)
            await self.page.click("body")
            await asyncio.sleep(self.timing.cleanup_delay)
        except Exception:
            pass
