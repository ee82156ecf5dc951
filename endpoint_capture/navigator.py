"""
Navigator Module

Visits each navigation target in turn, retrying failed navigations, and keeps
the request listener armed for a fixed capture window once a page loads.
"""

import asyncio
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from .config import DEFAULT_ERROR_PAGE_PATTERNS, TimingPolicy
from .errors import NavigationError
from .models import (
    CapturedCall,
    ExportPrintResult,
    NavigationFailure,
    NavigationTarget,
    PageVisit,
    TargetState,
)
from .network_listener import RequestListener


class NavigationOrchestrator:
    """Drives one page through the navigation worklist, strictly in order."""

    def __init__(
        self,
        page,
        listener: RequestListener,
        timing: Optional[TimingPolicy] = None,
        retry_attempts: int = 3,
        error_page_patterns: Sequence[str] = DEFAULT_ERROR_PAGE_PATTERNS,
        interaction_driver=None,
        verbose: bool = False,
    ):
        """
        Initialize the orchestrator.

        Args:
            page: Browser page shared by the whole run
            listener: Listener holding the run-wide dedup table
            timing: Wait and timeout policy
            retry_attempts: Navigation attempts per target before giving up
            error_page_patterns: URL fragments that mark a landing page as an error
            interaction_driver: Optional export/print driver run after each page
            verbose: Enable verbose logging
        """
        self.page = page
        self.listener = listener
        self.timing = timing or TimingPolicy()
        self.retry_attempts = retry_attempts
        self.error_page_patterns = tuple(error_page_patterns)
        self.interaction_driver = interaction_driver
        self.verbose = verbose
        self.visits: List[PageVisit] = []
        self.failures: List[NavigationFailure] = []
        self._failed_urls = set()

    @property
    def captured_calls(self) -> List[CapturedCall]:
        return self.listener.calls

    @property
    def export_print_results(self) -> List[ExportPrintResult]:
        return [visit.export_print for visit in self.visits if visit.export_print]

    async def run(self, targets: Sequence[NavigationTarget]) -> List[CapturedCall]:
        """
        Visit every target and return all calls captured across the run.

        Failures are recorded in ``self.failures`` and never stop the run.
        """
        total = len(targets)
        for index, target in enumerate(targets, start=1):
            if index > 1:
                await asyncio.sleep(self.timing.target_pause)

            if self.verbose:
                print(f"\n➡️  [{index}/{total}] Navigating to: {target.url}")

            visit = await self.visit(target)

            if self.verbose:
                if visit.succeeded:
                    print(f"    ✅ {visit.calls_captured} new API calls captured")
                else:
                    print(f"    ❌ Giving up on {target.url}: {visit.error}")

        return self.captured_calls

    async def visit(self, target: NavigationTarget) -> PageVisit:
        """Process one target through navigation, capture and interaction."""
        visit = PageVisit(target=target)
        self.visits.append(visit)

        session = self.listener.start_capture()
        try:
            error = await self._navigate_with_retries(visit)
            if error is not None:
                visit.state = TargetState.FAILED
                visit.error = error
                self._record_failure(target.url, error)
                return visit

            visit.state = TargetState.CAPTURE_WINDOW
            await asyncio.sleep(self.timing.capture_window)
        finally:
            self.listener.stop_capture(session)
            visit.calls_captured = len(session.calls)

        visit.state = TargetState.SUCCEEDED
        visit.title = await self._page_title()

        if self.interaction_driver is not None:
            visit.export_print = await self.interaction_driver.process_page(target.url)

        return visit

    async def _navigate_with_retries(self, visit: PageVisit) -> Optional[str]:
        """
        Try to navigate to the visit's target.

        Returns:
            None on success, otherwise the reason of the final failed attempt
        """
        reason = None
        for attempt in range(1, self.retry_attempts + 1):
            if attempt > 1:
                await asyncio.sleep(self.timing.retry_delay)

            visit.state = TargetState.NAVIGATING
            visit.attempts = attempt
            try:
                await self.navigate(visit.target.url)
                return None
            except NavigationError as e:
                reason = str(e)
            except Exception as e:
                reason = f"{type(e).__name__}: {e}"

            if self.verbose:
                print(
                    f"    ⚠️  Attempt {attempt}/{self.retry_attempts} failed for "
                    f"{visit.target.url}: {reason}"
                )
        return reason

    async def navigate(self, url: str) -> None:
        """
        Navigate once, racing the browser's navigation against an outer timer.

        Raises:
            NavigationError: On timeout or when the page lands on an error URL
        """
        navigation = self.page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self.timing.navigation_timeout * 1000,
        )
        try:
            await asyncio.wait_for(navigation, timeout=self.timing.race_timeout)
        except asyncio.TimeoutError:
            raise NavigationError(
                f"Navigation did not settle within {self.timing.race_timeout}s"
            )

        landed = self.page.url
        if self.is_error_page(landed):
            raise NavigationError(f"Landed on error page: {landed}")

    def is_error_page(self, url: str) -> bool:
        lowered = url.lower()
        return any(pattern in lowered for pattern in self.error_page_patterns)

    def _record_failure(self, url: str, reason: str) -> None:
        if url in self._failed_urls:
            return
        self._failed_urls.add(url)
        self.failures.append(NavigationFailure(url=url, reason=reason))

    async def _page_title(self) -> str:
        try:
            soup = BeautifulSoup(await self.page.content(), "html.parser")
        except Exception as e:
            if self.verbose:
                print(f"    ⚠️  Could not read page title: {e}")
            return ""
        title = soup.find("title")
        return title.get_text().strip() if title else ""
