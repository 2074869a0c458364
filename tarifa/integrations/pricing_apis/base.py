"""
Abstract Base Class for Pricing API Clients

Shared plumbing for price feed clients:
- Lazily created httpx client
- Retries with exponential backoff for timeouts and transient 5xx responses
- Error taxonomy used by the service and HTTP layers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
import asyncio
import random

import httpx
import structlog

from tarifa.optimization.appliance_models import HourlyPriceRecord

logger = structlog.get_logger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class APIError(Exception):
    """Base exception for price feed failures"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        api_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.api_name = api_name

    def __str__(self) -> str:
        text = f"[{self.api_name}] {self.message}" if self.api_name else self.message
        if self.status_code:
            text = f"{text} (HTTP {self.status_code})"
        return text


class RateLimitError(APIError):
    """The feed answered 429"""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServiceUnavailableError(APIError):
    """The feed kept failing with a server error"""

    def __init__(self, message: str = "Service unavailable", **kwargs):
        super().__init__(message, **kwargs)


class PriceParseError(APIError):
    """Raised when a response carries no usable price series"""


# =============================================================================
# RETRY CONFIGURATION
# =============================================================================


@dataclass
class RetryConfig:
    """Backoff policy for transient failures"""

    max_retries: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True

    retryable_status_codes: tuple[int, ...] = (408, 500, 502, 503, 504)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def get_delay(self, attempt: int) -> float:
        """Seconds to wait after the given (0-based) failed attempt"""
        delay = self.base_delay_seconds * self.exponential_base ** attempt
        delay = min(delay, self.max_delay_seconds)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay


class _RetryableResponse(Exception):
    """A response worth retrying (internal to the retry loop)"""

    def __init__(self, response: httpx.Response):
        super().__init__(response.status_code)
        self.response = response


# =============================================================================
# BASE CLIENT
# =============================================================================


class BasePricingClient(ABC):
    """
    Abstract base class for pricing API clients.

    Subclasses supply default headers and ``get_hourly_prices``; requests go
    through ``get``, which handles retries and maps failures to APIError.
    """

    def __init__(
        self,
        base_url: str,
        client_name: str,
        timeout: float = 30.0,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client_name = client_name
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logger.bind(api_client=client_name)

    @abstractmethod
    def _get_default_headers(self) -> dict[str, str]:
        """Headers sent with every request"""

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self._get_default_headers(),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "BasePricingClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _error(self, message: str, **kwargs) -> APIError:
        return APIError(message=message, api_name=self.client_name, **kwargs)

    def _check_response(self, response: httpx.Response) -> httpx.Response:
        """
        Map an HTTP status to the error taxonomy.

        Raises:
            _RetryableResponse: For a retryable server error
            RateLimitError: On 429
            ServiceUnavailableError: On any other 5xx
            APIError: On 4xx
        """
        code = response.status_code

        if code == 429:
            raise RateLimitError(
                retry_after=int(response.headers.get("Retry-After", 60)),
                status_code=code,
                api_name=self.client_name,
            )
        if code in self.retry_config.retryable_status_codes:
            raise _RetryableResponse(response)
        if code >= 500:
            raise ServiceUnavailableError(
                status_code=code,
                response_body=response.text,
                api_name=self.client_name,
            )
        if code >= 400:
            raise self._error(
                f"API Error: {code}",
                status_code=code,
                response_body=response.text,
            )
        return response

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """
        Send a request, retrying timeouts and transient server errors.

        Raises:
            APIError: When the request fails for good
        """
        attempts = self.retry_config.max_attempts
        last_failure: Optional[Exception] = None

        for attempt in range(attempts):
            client = await self._get_client()
            self.logger.debug(
                "api_request_start",
                method=method,
                endpoint=endpoint,
                attempt=attempt + 1,
            )

            try:
                response = self._check_response(
                    await client.request(method=method, url=endpoint, params=params)
                )
            except _RetryableResponse as retryable:
                last_failure = retryable
                if attempt + 1 == attempts:
                    raise ServiceUnavailableError(
                        status_code=retryable.response.status_code,
                        response_body=retryable.response.text,
                        api_name=self.client_name,
                    ) from None
                event = "api_request_retry"
                context = {"status_code": retryable.response.status_code}
            except httpx.TimeoutException as e:
                last_failure = e
                if attempt + 1 == attempts:
                    break
                event = "api_request_timeout"
                context = {}
            except httpx.HTTPError as e:
                self.logger.error(
                    "api_request_error",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise self._error(str(e)) from e
            else:
                self.logger.info(
                    "api_request_success",
                    method=method,
                    endpoint=endpoint,
                    status_code=response.status_code,
                )
                return response

            delay = self.retry_config.get_delay(attempt)
            self.logger.warning(event, attempt=attempt + 1, delay=delay, **context)
            await asyncio.sleep(delay)

        raise self._error(f"Request failed after {attempts} attempts") from last_failure

    async def get(
        self,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """Make GET request"""
        return await self._request("GET", endpoint, params)

    @abstractmethod
    async def get_hourly_prices(self, day: date) -> List[HourlyPriceRecord]:
        """Get the normalized 24-hour price curve for a day"""
