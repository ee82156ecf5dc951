"""
Authentication Module

Logs the browser page into the frontend before any capture starts.
"""

from typing import Optional

from .config import TimingPolicy
from .errors import AuthenticationError


USERNAME_SELECTOR = "#Email"
PASSWORD_SELECTOR = "#Password"
SUBMIT_SELECTOR = 'button[type="submit"]:first-of-type'
POST_LOGIN_SELECTOR = "body"


class Authenticator:
    """Form login against the frontend, skipped when a session already exists."""

    def __init__(
        self,
        page,
        base_url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        login_path: str = "/",
        dashboard_marker: str = "/dashboard",
        timing: Optional[TimingPolicy] = None,
        verbose: bool = False,
    ):
        self.page = page
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.login_path = login_path
        self.dashboard_marker = dashboard_marker
        self.timing = timing or TimingPolicy()
        self.verbose = verbose
        self.authenticated = False

    @property
    def login_url(self) -> str:
        return f"{self.base_url}/{self.login_path.lstrip('/')}"

    def is_authenticated_url(self, url: str) -> bool:
        return self.dashboard_marker in url or url.rstrip("/") == self.base_url

    async def login_form_shown(self) -> bool:
        try:
            return bool(await self.page.query_selector_all(USERNAME_SELECTOR))
        except Exception:
            return False

    async def login(self) -> None:
        """
        Authenticate, or confirm an existing session.

        Raises:
            AuthenticationError: If credentials are missing or login fails
        """
        if self.verbose:
            print(f"🔑 Logging in at: {self.login_url}")

        timeout = self.timing.navigation_timeout * 1000
        try:
            await self.page.goto(self.login_url, wait_until="networkidle", timeout=timeout)
        except Exception as e:
            raise AuthenticationError(f"Login failed: could not open login page: {e}")

        # The login form may be served at the base URL itself
        if self.is_authenticated_url(self.page.url) and not await self.login_form_shown():
            if self.verbose:
                print("    Already logged in or redirected to dashboard, skipping login")
            self.authenticated = True
            return

        if not self.username or not self.password:
            raise AuthenticationError(
                "Login failed: the login form is shown but no credentials are configured"
            )

        try:
            if self.verbose:
                print(f"    📧 Entering username: {self.username}")
            await self.page.fill(USERNAME_SELECTOR, self.username)
            await self.page.fill(PASSWORD_SELECTOR, self.password)
            await self.page.click(SUBMIT_SELECTOR)
            await self.page.wait_for_selector(POST_LOGIN_SELECTOR, timeout=timeout)
        except Exception as e:
            raise AuthenticationError(f"Login failed: {e}")

        on_login_page = self.page.url.rstrip("/") == self.login_url.rstrip("/")
        if on_login_page and await self.login_form_shown():
            raise AuthenticationError("Login failed: still on the login page after submitting")

        self.authenticated = True
        if self.verbose:
            print("✅ Authentication successful!")
