"""
Shared fixtures: an in-memory stand-in for a Playwright page.
"""

import asyncio

import pytest

from endpoint_capture.config import TimingPolicy


class FakeRequest:
    def __init__(self, url, method="GET", resource_type="xhr"):
        self.url = url
        self.method = method
        self.resource_type = resource_type


class FakeKeyboard:
    def __init__(self):
        self.pressed = []

    async def press(self, key):
        self.pressed.append(key)


class FakeElement:
    def __init__(self, page, name, on_click=None):
        self.page = page
        self.name = name
        self.on_click = on_click

    async def click(self):
        self.page.clicks.append(self.name)
        if self.on_click:
            self.on_click()


class FakePage:
    """Emulates the parts of playwright.async_api.Page the capture tool uses."""

    def __init__(self):
        self.url = "about:blank"
        self.handlers = {}
        self.page_requests = {}
        self.goto_errors = {}
        self.redirects = {}
        self.hanging_urls = set()
        self.elements = {}
        self.titles = {}
        self.clicks = []
        self.filled = {}
        self.goto_calls = []
        self.load_state_waits = []
        self.keyboard = FakeKeyboard()

    # Events
    def on(self, event, handler):
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event, handler):
        self.handlers.get(event, []).remove(handler)

    def listener_count(self, event="request"):
        return len(self.handlers.get(event, []))

    def emit_request(self, url, method="GET", resource_type="xhr"):
        request = FakeRequest(url, method, resource_type)
        for handler in list(self.handlers.get("request", [])):
            handler(request)

    # Navigation
    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        if url in self.hanging_urls:
            await asyncio.sleep(10)
        errors = self.goto_errors.get(url)
        if errors:
            raise errors.pop(0)
        self.url = self.redirects.get(url, url)
        for method, api_url, *kind in self.page_requests.get(url, []):
            self.emit_request(api_url, method, kind[0] if kind else "xhr")

    async def content(self):
        title = self.titles.get(self.url, "")
        return f"<html><head><title>{title}</title></head><body></body></html>"

    async def wait_for_load_state(self, state=None, timeout=None):
        self.load_state_waits.append((state, timeout))

    # Elements
    def add_elements(self, selector, *elements):
        self.elements[selector] = list(elements)

    async def query_selector_all(self, selector):
        return list(self.elements.get(selector, []))

    async def wait_for_selector(self, selector, timeout=None, state=None):
        found = self.elements.get(selector)
        if not found:
            raise TimeoutError(f"Timeout waiting for {selector}")
        return found[0]

    async def click(self, selector):
        if selector == "body":
            self.clicks.append("body")
            return
        found = self.elements.get(selector)
        if not found:
            raise TimeoutError(f"No element for {selector}")
        await found[0].click()

    async def fill(self, selector, value):
        if selector not in self.elements:
            raise TimeoutError(f"No input for {selector}")
        self.filled[selector] = value


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def make_element():
    def factory(page, name, on_click=None):
        return FakeElement(page, name, on_click)

    return factory


@pytest.fixture
def instant_timing():
    return TimingPolicy.instant()
