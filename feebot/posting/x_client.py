"""X (Twitter) API v2 client using OAuth 1.0a user context."""

from collections.abc import Generator

from typing import Any

import httpx
from oauthlib.oauth1 import Client as OAuth1Client

from feebot.helpers.config import XCredentials
from feebot.helpers.constants import X_ME_URL, X_POSTS_URL, X_STATUS_URL
from feebot.helpers.errors import AuthError, PostError
from feebot.helpers.http import JSON_HEADERS
from feebot.helpers.logging import get_logger
from feebot.helpers.models import XUser


logger = get_logger(__name__)


class OAuth1Auth(httpx.Auth):
    """Sign each request with an HMAC-SHA1 OAuth 1.0a Authorization header.

    Only the URL and method are signed; JSON bodies are not part of the
    OAuth signature base string.
    """

    def __init__(self, credentials: XCredentials) -> None:
        self._signer = OAuth1Client(
            credentials.app_key,
            client_secret=credentials.app_secret,
            resource_owner_key=credentials.access_token,
            resource_owner_secret=credentials.access_secret,
        )

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        _, headers, _ = self._signer.sign(str(request.url), http_method=request.method)
        request.headers["Authorization"] = headers["Authorization"]
        yield request


def post_url(handle: str, post_id: str) -> str:
    return X_STATUS_URL.format(handle=handle, post_id=post_id)


def _response_data(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    data = body.get("data") if isinstance(body, dict) else None
    return data if isinstance(data, dict) else {}


class XClient:
    """Identity check and posting against the X API."""

    def __init__(
        self,
        credentials: XCredentials,
        client: httpx.AsyncClient,
        *,
        me_url: str = X_ME_URL,
        posts_url: str = X_POSTS_URL,
    ) -> None:
        """Initialize the X client.

        Args:
            credentials: OAuth 1.0a user-context credentials
            client: Shared HTTP client
            me_url: Identity endpoint
            posts_url: Post creation endpoint
        """
        self._client = client
        self._auth = OAuth1Auth(credentials)
        self.me_url = me_url
        self.posts_url = posts_url

    async def get_me(self) -> XUser:
        """Return the authenticated account.

        Raises:
            AuthError: If the request fails, is rejected, or lacks id/username
        """
        try:
            response = await self._client.get(
                self.me_url, auth=self._auth, headers=JSON_HEADERS
            )
        except httpx.HTTPError as e:
            msg = "X identity check failed"
            raise AuthError(msg, str(e) or type(e).__name__) from e

        if not response.is_success:
            msg = f"X identity check HTTP {response.status_code}"
            raise AuthError(msg, response.text)

        data = _response_data(response)
        if not data.get("id") or not data.get("username"):
            msg = "X identity check returned no user"
            raise AuthError(msg, response.text)

        return XUser(id=str(data["id"]), username=str(data["username"]))

    async def create_post(self, text: str) -> str:
        """Publish a text post and return its id.

        Raises:
            PostError: If the request fails, is rejected, or returns no id
        """
        logger.debug("Posting %d characters", len(text))
        try:
            response = await self._client.post(
                self.posts_url,
                auth=self._auth,
                headers=JSON_HEADERS,
                json={"text": text},
            )
        except httpx.HTTPError as e:
            msg = "X post request failed"
            raise PostError(msg, str(e) or type(e).__name__) from e

        if not response.is_success:
            msg = f"X post HTTP {response.status_code}"
            raise PostError(msg, response.text)

        post_id = _response_data(response).get("id")
        if not post_id:
            msg = "X post API returned no id"
            raise PostError(msg, response.text)

        return str(post_id)


__all__ = ["OAuth1Auth", "XClient", "post_url"]
