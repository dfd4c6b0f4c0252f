"""
Shared HTTP plumbing for the simulado REST clients.

Every client owns one lazily created httpx.AsyncClient, attaches the bearer
token (when a token provider is given) to each request, and converts httpx
failures and malformed bodies into SimuladoApiError. Idempotent reads can
opt into retries with exponential backoff on timeouts, connection errors and
5xx responses.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
from loguru import logger

from simulado.core.errors import SimuladoApiError

TokenProvider = Callable[[], str | None]


class BaseApiClient:
    """Async HTTP client bound to one service base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Service root, e.g. http://localhost:8000/api/v1/exams
            timeout: Request timeout in seconds
            retry_attempts: Attempts for requests sent with retry=True
            retry_backoff: Base delay in seconds; attempt n waits base * 2**n
            token_provider: Returns the current bearer token, if any
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff = retry_backoff
        self.token_provider = token_provider
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _auth_headers(self) -> dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        retry: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request and return the successful response.

        Args:
            method: HTTP method
            path: Path relative to base_url
            action: Human readable description used in logs and errors
            retry: Retry timeouts, connection errors and 5xx responses

        Raises:
            SimuladoApiError: On any communication failure or non-2xx status
        """
        client = await self._ensure_client()
        attempts = self.retry_attempts if retry else 1
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}

        for attempt in range(attempts):
            is_last = attempt == attempts - 1
            try:
                response = await client.request(method, path, headers=headers, **kwargs)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if status >= 500 and not is_last:
                    wait_time = self.retry_backoff * 2**attempt
                    logger.warning(
                        f"Server error {status} while trying to {action} "
                        f"(attempt {attempt + 1}/{attempts}). Retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"Error trying to {action}: HTTP {status}")
                raise SimuladoApiError.from_http_error(f"Failed to {action}", e) from e

            except httpx.RequestError as e:
                if not is_last:
                    wait_time = self.retry_backoff * 2**attempt
                    logger.warning(
                        f"Request error while trying to {action} "
                        f"(attempt {attempt + 1}/{attempts}): {e}. Retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                    continue
                logger.error(f"Connection error trying to {action}: {e}")
                raise SimuladoApiError.from_http_error(f"Failed to {action}", e) from e

        # range(attempts) always returns or raises above
        raise AssertionError("unreachable")

    def _parse(
        self,
        response: httpx.Response,
        action: str,
        parser: Callable[[Any], Any] | None = None,
    ) -> Any:
        """
        Decode a successful response body, optionally building a model from it.

        Raises:
            SimuladoApiError: When the body is not JSON or does not have the
                expected shape (unknown enum values, missing keys)
        """
        try:
            data = response.json()
            return parser(data) if parser else data
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Malformed response while trying to {action}: {e}")
            raise SimuladoApiError(
                f"Failed to {action}: malformed response",
                status_code=response.status_code,
                detail=str(e),
            ) from e
