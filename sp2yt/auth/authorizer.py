"""Interactive OAuth authorization: open a URL, read back the redirect."""

import logging
import webbrowser
from typing import Protocol
from urllib.parse import parse_qs, urlsplit

from sp2yt.core.models import AuthError

logger = logging.getLogger(__name__)


class InteractiveAuthorizer(Protocol):
    def authorize(self, url: str, provider: str) -> str: ...


def extract_code(redirect_url: str) -> str | None:
    """Return the ``code`` query parameter of a redirect URL, if any."""
    query = urlsplit(redirect_url.strip()).query
    if not query:
        return None
    values = parse_qs(query).get("code")
    return values[0] if values and values[0] else None


class ConsoleAuthorizer:
    """Opens the authorization page and asks for the pasted redirect URL."""

    def __init__(self, open_browser: bool = True):
        self._open_browser = open_browser

    def authorize(self, url: str, provider: str) -> str:
        print(f"\n{provider} authorization")
        print("Grant access in the browser, then copy the full URL you are redirected to.")
        print(f"If no browser opens, visit:\n  {url}\n")
        if self._open_browser:
            try:
                webbrowser.open(url)
            except webbrowser.Error as e:
                logger.warning(f"Could not open browser: {e}")

        try:
            redirect = input(f"Paste the FULL redirected URL after {provider} login: ")
        except (EOFError, KeyboardInterrupt) as e:
            raise AuthError("Setup cancelled.") from e

        if not redirect.strip():
            raise AuthError("Setup cancelled.")
        code = extract_code(redirect)
        if not code:
            raise AuthError("No code found in redirected URL.")
        return code
