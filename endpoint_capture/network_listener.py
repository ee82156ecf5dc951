"""
Network Listener Module

Subscribes to a browser page's outgoing-request events and records the API
calls it observes, at most once per (method, URL) pair.
"""

import itertools
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

from .models import CapturedCall, make_call_key


API_RESOURCE_TYPES = frozenset({"xhr", "fetch"})

RequestPredicate = Callable[[object], bool]


class CaptureSession:
    """
    A bounded capture window over the listener's running call list.

    Calls belong to a session by position: everything appended to the
    listener between start and stop.
    """

    def __init__(self, listener: "RequestListener", token: int):
        self._listener = listener
        self.token = token
        self.start_index = listener.count
        self.end_index: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.end_index is None

    @property
    def calls(self) -> List[CapturedCall]:
        end = self._listener.count if self.end_index is None else self.end_index
        return self._listener.calls[self.start_index:end]

    def close(self) -> None:
        if self.end_index is None:
            self.end_index = self._listener.count


class RequestListener:
    """Deduplicating recorder of API requests issued by one page."""

    def __init__(
        self,
        page,
        api_prefix: str,
        resource_types=API_RESOURCE_TYPES,
        label: str = "API",
        verbose: bool = False,
    ):
        """
        Initialize the listener.

        Args:
            page: Browser page emitting "request" events
            api_prefix: Only URLs starting with this prefix are recorded
            resource_types: Resource kinds treated as API calls
            label: Name used in verbose output
            verbose: Enable verbose logging
        """
        self.page = page
        self.api_prefix = api_prefix
        self.resource_types = frozenset(resource_types)
        self.label = label
        self.verbose = verbose
        self._seen: Dict[str, CapturedCall] = {}
        self._calls: List[CapturedCall] = []
        self._handlers: Dict[int, Callable] = {}
        self._tokens = itertools.count(1)

    @property
    def calls(self) -> List[CapturedCall]:
        return list(self._calls)

    @property
    def count(self) -> int:
        return len(self._calls)

    def is_api_request(self, request) -> bool:
        return (
            request.url.startswith(self.api_prefix)
            and request.resource_type in self.resource_types
        )

    def record(self, method: str, url: str) -> Optional[CapturedCall]:
        """
        Record a call unless its (method, URL) pair was already seen.

        Returns:
            The new CapturedCall, or None for a duplicate
        """
        key = make_call_key(method, url)
        if key in self._seen:
            return None

        call = CapturedCall(url=url, http_method=method, source_page_url=self.page.url)
        self._seen[key] = call
        self._calls.append(call)
        if self.verbose:
            print(f"    🎯 Captured {self.label} call: {method} {url}")
        return call

    def subscribe(self, predicate: Optional[RequestPredicate] = None) -> int:
        """
        Attach a request handler to the page.

        Args:
            predicate: Decides which requests are recorded (default: API prefix
                and xhr/fetch resource kind)

        Returns:
            Token to pass to unsubscribe
        """
        accept = predicate or self.is_api_request

        def handle_request(request):
            if accept(request):
                self.record(request.method, request.url)

        token = next(self._tokens)
        self._handlers[token] = handle_request
        self.page.on("request", handle_request)
        return token

    def unsubscribe(self, token: int) -> None:
        handler = self._handlers.pop(token, None)
        if handler is not None:
            self.page.remove_listener("request", handler)

    def start_capture(self, predicate: Optional[RequestPredicate] = None) -> CaptureSession:
        return CaptureSession(self, self.subscribe(predicate))

    def stop_capture(self, session: CaptureSession) -> List[CapturedCall]:
        self.unsubscribe(session.token)
        session.close()
        return session.calls

    @asynccontextmanager
    async def capture(self, predicate: Optional[RequestPredicate] = None):
        """Arm the listener for the duration of the ``async with`` block."""
        session = self.start_capture(predicate)
        try:
            yield session
        finally:
            self.stop_capture(session)

    def clear(self) -> None:
        self._seen.clear()
        self._calls.clear()
