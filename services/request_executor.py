"""
Request executor.

Runs one logical backend call with a per-attempt timeout and bounded
exponential backoff. Only transient failures are retried:

- connection-level failures (NetworkError)
- expired attempts (RequestTimeoutError)
- 502/503/504 responses that carry no structured error body

A structured application error (unified or legacy envelope) is returned
as-is whatever its status: retrying a validated rejection cannot change the
outcome. Cancelling the awaiting task stops immediately and is never retried.
"""

import asyncio
from typing import Awaitable, Callable, Optional

import structlog

from exceptions import AppError, NetworkError, RequestTimeoutError
from integrations.transport import Transport
from models.requests import RawRequest, RawResponse, RequestConfig
from services.response_normalizer import decode_body, has_structured_error

logger = structlog.get_logger(__name__)


TRANSIENT_STATUS_CODES = {502, 503, 504}

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(retry_number: int, max_delay: float) -> float:
    """
    Delay before retry `retry_number` (1-based): 1s, 2s, 4s, ... capped.

    Args:
        retry_number: 1 for the first retry
        max_delay: Ceiling in seconds

    Returns:
        Delay in seconds
    """
    return min(float(2 ** (retry_number - 1)), max_delay)


def is_transient_response(response: RawResponse) -> bool:
    """5xx gateway/unavailable answers without a structured error body."""
    if response.status_code not in TRANSIENT_STATUS_CODES:
        return False
    try:
        body = decode_body(response)
    except ValueError:
        return True
    return not has_structured_error(body)


class RequestExecutor:
    """
    Executes raw requests through a transport.

    Holds no mutable state; one instance can serve any number of callers.
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[RequestConfig] = None,
        sleep: Sleep = asyncio.sleep
    ):
        self.transport = transport
        self.config = config or RequestConfig()
        self.sleep = sleep

    async def execute(
        self,
        request: RawRequest,
        config: Optional[RequestConfig] = None
    ) -> RawResponse:
        """
        Send a request, retrying transient failures.

        Args:
            request: Request to send
            config: Per-call policy (defaults to the executor's)

        Returns:
            RawResponse of the last attempt

        Raises:
            NetworkError: Connection failed on every attempt
            RequestTimeoutError: Last attempt timed out
            asyncio.CancelledError: Caller cancelled the call
        """
        config = config or self.config
        last_error: Optional[AppError] = None
        response: Optional[RawResponse] = None

        for attempt in range(1, config.max_attempts + 1):
            if attempt > 1:
                delay = backoff_delay(attempt - 1, config.max_backoff_seconds)
                logger.warning(
                    "request_retry_scheduled",
                    request=request.describe(),
                    attempt=attempt,
                    max_attempts=config.max_attempts,
                    delay_seconds=delay,
                    reason=last_error.code if last_error else response.status_code,
                )
                await self.sleep(delay)

            try:
                response = await self._attempt(request, config)
            except (NetworkError, RequestTimeoutError) as e:
                last_error = e
                response = None
                continue

            if is_transient_response(response):
                last_error = None
                logger.warning(
                    "request_transient_status",
                    request=request.describe(),
                    status_code=response.status_code,
                    attempt=attempt,
                )
                continue

            logger.debug(
                "request_completed",
                request=request.describe(),
                status_code=response.status_code,
                attempt=attempt,
            )
            return response

        if response is not None:
            return response

        logger.error(
            "request_failed",
            request=request.describe(),
            attempts=config.max_attempts,
            error=last_error.message,
            error_code=last_error.code,
        )
        raise last_error

    async def _attempt(self, request: RawRequest, config: RequestConfig) -> RawResponse:
        """One bounded attempt; expiry cancels the in-flight send."""
        try:
            return await asyncio.wait_for(
                self.transport.send(request, config.timeout_seconds),
                timeout=config.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                config.timeout_ms,
                details={"request": request.describe()}
            ) from e
