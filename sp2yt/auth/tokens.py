"""
OAuth token lifecycle for the source and destination providers.

Each provider has two credential tiers:
- refresh token: obtained once through the interactive authorization-code
  flow, persisted in the credential store and reused on every run
- access token: exchanged from the refresh token at the start of a run,
  never persisted

Spotify tokens are exchanged with plain requests; Google refreshes go through
google-auth credentials.

A rejected refresh token is fatal unless re-authorization is enabled, in
which case the stored refresh token is dropped and the interactive flow
runs once more. Network and server errors never touch the stored token.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from sp2yt.auth.authorizer import InteractiveAuthorizer
from sp2yt.auth.store import CredentialStore, need
from sp2yt.core.models import AuthError, ProviderSession, TokenRejected

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8888/callback"


@dataclass(frozen=True)
class ProviderConfig:
    """Static OAuth settings for one provider."""
    name: str
    key_prefix: str
    authorize_url: str
    token_url: str
    scopes: tuple[str, ...]
    redirect_uri: str = DEFAULT_REDIRECT_URI
    basic_auth: bool = False
    google_auth: bool = False
    extra_authorize_params: dict[str, str] = field(default_factory=dict)

    @property
    def client_id_key(self) -> str:
        return f"{self.key_prefix}_client_id"

    @property
    def client_secret_key(self) -> str:
        return f"{self.key_prefix}_client_secret"

    @property
    def refresh_key(self) -> str:
        return f"{self.key_prefix}_refresh_token"

    def authorization_url(self, client_id: str) -> str:
        params = {
            "response_type": "code",
            "client_id": client_id,
            "scope": " ".join(self.scopes),
            "redirect_uri": self.redirect_uri,
        }
        params.update(self.extra_authorize_params)
        return f"{self.authorize_url}?{urlencode(params)}"


SPOTIFY = ProviderConfig(
    name="Spotify",
    key_prefix="sp",
    authorize_url="https://accounts.spotify.com/authorize",
    token_url="https://accounts.spotify.com/api/token",
    scopes=("playlist-read-private", "playlist-read-collaborative"),
    basic_auth=True,
)

GOOGLE = ProviderConfig(
    name="Google (YouTube)",
    key_prefix="g",
    authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
    token_url="https://oauth2.googleapis.com/token",
    scopes=(
        "https://www.googleapis.com/auth/youtube",
        "https://www.googleapis.com/auth/youtube.force-ssl",
    ),
    google_auth=True,
    extra_authorize_params={"access_type": "offline", "prompt": "consent"},
)


class TokenManager:
    """Turns persisted refresh tokens into access tokens, authorizing on first use."""

    def __init__(self, store: CredentialStore, authorizer: InteractiveAuthorizer,
                 http: Any = None, timeout: float = 30,
                 reauthorize_on_refresh_failure: bool = False):
        self._store = store
        self._authorizer = authorizer
        self._http = http or requests.Session()
        self._timeout = timeout
        self._reauthorize = reauthorize_on_refresh_failure

    def open_session(self, provider: ProviderConfig, client_id: str = "",
                     client_secret: str = "") -> ProviderSession:
        """Resolve client credentials (config, then store, then prompt) and the stored refresh token."""
        client_id = client_id or need(
            self._store, provider.client_id_key, f"Enter {provider.name} CLIENT_ID")
        client_secret = client_secret or need(
            self._store, provider.client_secret_key,
            f"Enter {provider.name} CLIENT_SECRET", is_sensitive=True)
        return ProviderSession(
            client_id=client_id,
            client_secret=client_secret,
            refresh_credential=self._store.get(provider.refresh_key),
        )

    def get_access_credential(self, provider: ProviderConfig, session: ProviderSession) -> str:
        if not session.refresh_credential:
            self._authorize(provider, session)

        try:
            return self._refresh(provider, session)
        except TokenRejected:
            if not self._reauthorize:
                raise
            logger.warning(f"{provider.name} refresh token rejected, re-authorizing")
            self._store.delete(provider.refresh_key)
            session.refresh_credential = None
            self._authorize(provider, session)
            return self._refresh(provider, session)

    def _authorize(self, provider: ProviderConfig, session: ProviderSession) -> None:
        """Interactive authorization-code flow. Persists the refresh token."""
        logger.info(f"No {provider.name} refresh token stored, starting authorization")
        code = self._authorizer.authorize(provider.authorization_url(session.client_id), provider.name)
        if not code:
            raise AuthError("No code found in redirected URL.")

        data = self._token_request(provider, session, {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": provider.redirect_uri,
        })
        refresh = data.get("refresh_token")
        if not refresh:
            raise AuthError(f"Failed to obtain {provider.name} refresh token.")

        self._store.set(provider.refresh_key, refresh)
        session.refresh_credential = refresh
        logger.info(f"{provider.name} authorized")

    def _refresh(self, provider: ProviderConfig, session: ProviderSession) -> str:
        if provider.google_auth:
            access, rotated = self._refresh_google(provider, session)
        else:
            data = self._token_request(provider, session, {
                "grant_type": "refresh_token",
                "refresh_token": session.refresh_credential,
            })
            access, rotated = data.get("access_token"), data.get("refresh_token")

        if not access:
            raise AuthError(f"{provider.name} token refresh failed")

        # Rotated refresh tokens replace the stored one
        if rotated and rotated != session.refresh_credential:
            self._store.set(provider.refresh_key, rotated)
            session.refresh_credential = rotated
            logger.debug(f"{provider.name} refresh token rotated")

        logger.debug(f"{provider.name} access token obtained")
        return access

    def _refresh_google(self, provider: ProviderConfig,
                        session: ProviderSession) -> tuple[str | None, str | None]:
        credentials = Credentials(
            token=None,
            refresh_token=session.refresh_credential,
            token_uri=provider.token_url,
            client_id=session.client_id,
            client_secret=session.client_secret,
            scopes=list(provider.scopes)
        )
        try:
            credentials.refresh(Request(session=self._http))
        except RefreshError as e:
            # 5xx and rate limits are retryable; invalid_grant is not
            if getattr(e, "retryable", False):
                raise AuthError(f"{provider.name} token refresh failed: {e}") from e
            raise TokenRejected(f"{provider.name} token request rejected: {e}") from e
        except TransportError as e:
            raise AuthError(f"{provider.name} token request failed: {e}") from e
        return credentials.token, credentials.refresh_token

    def _token_request(self, provider: ProviderConfig, session: ProviderSession,
                       form: dict[str, str]) -> dict:
        auth = None
        if provider.basic_auth:
            auth = (session.client_id, session.client_secret)
        else:
            form = {**form, "client_id": session.client_id, "client_secret": session.client_secret}

        try:
            response = self._http.post(provider.token_url, data=form, auth=auth, timeout=self._timeout)
        except requests.RequestException as e:
            raise AuthError(f"{provider.name} token request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code != 200:
            reason = data.get("error_description") or data.get("error") or f"HTTP {response.status_code}"
            if response.status_code in (400, 401):
                raise TokenRejected(f"{provider.name} token request rejected: {reason}")
            raise AuthError(f"{provider.name} token request failed: {reason}")
        return data
