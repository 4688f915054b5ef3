"""
Caller authentication in front of the search endpoints.

Callers send their email and password with every request. A password-grant
call to the auth service is only made when the session cache has no live
entry for the email; a successful call starts a new cached session.
"""
import logging
from typing import Optional

import httpx

from src.db.session_cache import SessionCache
from src.search.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class PasswordAuthenticator:
    """
    Verifies email/password pairs against a password-grant token endpoint.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        auth_url: str,
        api_key: Optional[str] = None,
    ) -> None:
        """
        Initialize the authenticator.

        Args:
            http_client: Shared async HTTP client
            auth_url: Base URL of the auth service
            api_key: API key sent in the ``apikey`` header
        """
        self.http_client = http_client
        self.token_url = f"{auth_url.rstrip('/')}/auth/v1/token"
        self.api_key = api_key

    async def authenticate(self, email: str, password: str) -> None:
        """
        Verify the credentials.

        Raises:
            AuthenticationError: If credentials are missing or rejected, or the
                auth service cannot be reached
        """
        if not email or not password:
            raise AuthenticationError("Missing email or password", status_code=401)

        headers = {"apikey": self.api_key} if self.api_key else {}
        try:
            response = await self.http_client.post(
                self.token_url,
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Auth service unreachable: {e}")
            raise AuthenticationError("Authentication service unavailable", status_code=503) from e

        if response.status_code != 200:
            logger.warning(f"Authentication rejected for {email}: HTTP {response.status_code}")
            raise AuthenticationError("Invalid credentials", status_code=response.status_code)


class SessionGate:
    """
    Lets a request through when its caller has a cached session or can
    authenticate now.
    """

    def __init__(self, cache: SessionCache, authenticator: PasswordAuthenticator) -> None:
        self.cache = cache
        self.authenticator = authenticator

    async def ensure_authenticated(self, email: str, password: str) -> None:
        """
        Authenticate the caller unless a session is already cached.

        Raises:
            AuthenticationError: If the caller cannot be authenticated
        """
        if email and await self.cache.exists(email):
            logger.debug(f"Session cache hit for {email}")
            return

        await self.authenticator.authenticate(email, password)
        await self.cache.remember(email)
        logger.info(f"Authenticated {email}")
