"""
Tests for the Interaction module (export/print capture).
"""

import asyncio
from dataclasses import replace

from endpoint_capture.config import TimingPolicy
from endpoint_capture.interaction import (
    EXPORT_BUTTONS,
    MENU_OPTIONS,
    PRINT_BUTTONS,
    ExportPrintDriver,
    SelectorChain,
)
from endpoint_capture.network_listener import RequestListener


API = "https://api.x.test"
PAGE_URL = "https://x.test/orders"


class TestSelectorChain:
    """Test cases for SelectorChain class."""

    def test_first_match_short_circuits(self, fake_page, make_element):
        chain = SelectorChain("demo", [".missing", ".second", ".third"])
        second = make_element(fake_page, "second")
        fake_page.add_elements(".second", second)
        fake_page.add_elements(".third", make_element(fake_page, "third"))

        match = asyncio.run(chain.first_match(fake_page))

        assert match == (".second", [second])

    def test_first_match_none(self, fake_page):
        chain = SelectorChain("demo", [".a", ".b"])
        assert asyncio.run(chain.first_match(fake_page)) is None

    def test_wait_for(self, fake_page, make_element):
        chain = SelectorChain("demo", [".a", ".b"])
        fake_page.add_elements(".b", make_element(fake_page, "b"))

        assert asyncio.run(chain.wait_for(fake_page, 0)) == ".b"
        assert asyncio.run(SelectorChain("x", [".zz"]).wait_for(fake_page, 0)) is None


class TestExportPrintDriver:
    """Test cases for ExportPrintDriver class."""

    def setup_method(self):
        self.timing = TimingPolicy.instant()

    def make_driver(self, page, **kwargs):
        listener = RequestListener(page, API, label="export/print")
        return ExportPrintDriver(page, listener, timing=self.timing, **kwargs)

    def install_export(self, page, make_element, option_count=2):
        """Export button opening a PrimeNG-style menu with ``option_count`` options."""
        options = [
            make_element(
                page,
                f"option-{index}",
                lambda index=index: page.emit_request(f"{API}/export/{index}", "POST"),
            )
            for index in range(option_count)
        ]

        def open_menu():
            page.add_elements("div.p-menuitem-content", make_element(page, "menu"))
            page.add_elements(MENU_OPTIONS.candidates[0], *options)

        page.add_elements(EXPORT_BUTTONS.candidates[0], make_element(page, "export", open_menu))

    def install_print(self, page, make_element):
        page.add_elements(
            PRINT_BUTTONS.candidates[0],
            make_element(page, "print-0", lambda: page.emit_request(f"{API}/print/hidden")),
            make_element(page, "print-1", lambda: page.emit_request(f"{API}/print/report")),
        )

    def test_export_and_print_buckets(self, fake_page, make_element):
        """Excel, PDF and print calls land in separate buckets."""
        fake_page.url = PAGE_URL
        self.install_export(fake_page, make_element)
        self.install_print(fake_page, make_element)
        driver = self.make_driver(fake_page)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert [c.url for c in result.excel] == [f"{API}/export/0"]
        assert [c.url for c in result.pdf] == [f"{API}/export/1"]
        assert [c.url for c in result.print] == [f"{API}/print/report"]
        assert result.excel[0].http_method == "POST"
        assert driver.results[PAGE_URL] is result
        assert fake_page.clicks.count("export") == 2
        assert "print-0" not in fake_page.clicks
        assert "Escape" in fake_page.keyboard.pressed
        assert fake_page.listener_count() == 0

    def test_pdf_is_last_option(self, fake_page, make_element):
        self.install_export(fake_page, make_element, option_count=3)
        driver = self.make_driver(fake_page)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert [c.url for c in result.excel] == [f"{API}/export/0"]
        assert [c.url for c in result.pdf] == [f"{API}/export/2"]
        assert "option-1" not in fake_page.clicks

    def test_single_option_only_excel(self, fake_page, make_element):
        self.install_export(fake_page, make_element, option_count=1)
        driver = self.make_driver(fake_page)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert len(result.excel) == 1
        assert result.pdf == []
        assert result.print == []

    def test_repeated_call_not_double_counted(self, fake_page, make_element):
        """Calls shared by both export options only count for the first bucket."""
        shared = lambda: fake_page.emit_request(f"{API}/export/shared")
        menu_options = [
            make_element(fake_page, "excel", shared),
            make_element(fake_page, "pdf", shared),
        ]

        def open_menu():
            fake_page.add_elements("div.p-menuitem-content", make_element(fake_page, "menu"))
            fake_page.add_elements(MENU_OPTIONS.candidates[0], *menu_options)

        fake_page.add_elements(
            EXPORT_BUTTONS.candidates[0], make_element(fake_page, "export", open_menu)
        )
        driver = self.make_driver(fake_page)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert len(result.excel) == 1
        assert result.pdf == []

    def test_menu_never_opens(self, fake_page, make_element):
        """A missing menu leaves export buckets empty but print still runs."""
        fake_page.add_elements(EXPORT_BUTTONS.candidates[0], make_element(fake_page, "export"))
        self.install_print(fake_page, make_element)
        driver = self.make_driver(fake_page, retries=2)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert result.excel == [] and result.pdf == []
        assert len(result.print) == 1
        assert fake_page.clicks.count("export") == 2

    def test_failing_click_is_soft(self, fake_page, make_element):
        def explode():
            raise RuntimeError("element detached")

        fake_page.add_elements(PRINT_BUTTONS.candidates[0], make_element(fake_page, "print", explode))
        driver = self.make_driver(fake_page)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert result is not None
        assert result.print == []
        assert fake_page.listener_count() == 0

    def test_no_controls(self, fake_page):
        driver = self.make_driver(fake_page)

        assert asyncio.run(driver.process_page(PAGE_URL)) is None
        assert driver.results == {}

    def test_alternate_selectors(self, fake_page, make_element):
        """Later selector candidates are used when the first ones are absent."""
        fake_page.add_elements(
            PRINT_BUTTONS.candidates[-1],
            make_element(fake_page, "print", lambda: fake_page.emit_request(f"{API}/print")),
        )
        driver = self.make_driver(fake_page)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert [c.url for c in result.print] == [f"{API}/print"]

    def test_dialog_cancel_button_used(self, fake_page, make_element):
        self.install_print(fake_page, make_element)
        fake_page.add_elements(
            "button:has-text('Cancel')", make_element(fake_page, "cancel")
        )
        driver = self.make_driver(fake_page)

        asyncio.run(driver.process_page(PAGE_URL))

        assert "cancel" in fake_page.clicks

    def test_network_idle_wait_after_clicks(self, fake_page, make_element):
        fake_page.url = PAGE_URL
        self.install_print(fake_page, make_element)
        self.timing = replace(self.timing, interaction_timeout=2)
        driver = self.make_driver(fake_page, wait_for_network_idle=True)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert [c.url for c in result.print] == [f"{API}/print/report"]
        assert fake_page.load_state_waits == [("networkidle", 2000)]

    def test_network_idle_skipped_without_timeout(self, fake_page, make_element):
        """A zero interaction timeout never becomes an unbounded browser wait."""
        fake_page.url = PAGE_URL
        self.install_export(fake_page, make_element)
        self.install_print(fake_page, make_element)
        driver = self.make_driver(fake_page, wait_for_network_idle=True)

        result = asyncio.run(driver.process_page(PAGE_URL))

        assert result.total == 3
        assert fake_page.load_state_waits == []
