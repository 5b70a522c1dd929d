import asyncio
import logging
from typing import Protocol, runtime_checkable

import aiohttp
from pydantic import BaseModel, ConfigDict

from core.exceptions import TransportError
from covalent.endpoints import EndpointDescriptor


class TransportResponse(BaseModel):
    """
    Raw outcome of one GET round trip.

    Attributes
    ----------
    status : int
        HTTP status code
    body : bytes
        Response body
    """
    status: int
    body: bytes

    model_config = ConfigDict(frozen=True)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class HttpTransport(Protocol):
    """
    Perform a GET at a URL and return the status and body, or fail.

    Implementations may raise any exception; ``RequestExecutor`` wraps it in
    ``TransportError``.
    """

    async def get(self, url: str) -> TransportResponse:
        ...

    async def close(self) -> None:
        ...


class AiohttpTransport:
    """
    ``HttpTransport`` backed by an aiohttp client session.

    Parameters
    ----------
    session : aiohttp.ClientSession | None
        Existing session; one is created on first use otherwise and then
        owned (and closed) by the transport
    """

    def __init__(self, session: aiohttp.ClientSession | None = None):
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def get(self, url: str) -> TransportResponse:
        session = self._get_session()
        async with session.get(url) as response:
            body = await response.read()
            return TransportResponse(status=response.status, body=body)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class RequestExecutor:
    """
    Issues exactly one GET per call; never retries.

    Non-success HTTP statuses are returned, not raised: the API reports
    logical failures inside the JSON body.

    Parameters
    ----------
    transport : HttpTransport
        Transport performing the request
    logger : logging.Logger
        Logger instance
    timeout : float | None
        Default per-request timeout in seconds
    """

    def __init__(
        self,
        transport: HttpTransport,
        logger: logging.Logger,
        timeout: float | None = None
    ):
        self.transport = transport
        self.logger = logger
        self.timeout = timeout

    async def execute(
        self,
        descriptor: EndpointDescriptor,
        timeout: float | None = None
    ) -> TransportResponse:
        """
        Perform the request described by ``descriptor``.

        Parameters
        ----------
        descriptor : EndpointDescriptor
            Request descriptor
        timeout : float | None
            Timeout in seconds for this call, overriding the default

        Returns
        -------
        TransportResponse
            Status and raw body

        Raises
        ------
        TransportError
            On connection, DNS or timeout failures, and on any other error
            raised by the transport; cancellation is not intercepted
        """
        timeout = timeout if timeout is not None else self.timeout
        self.logger.info(f"Sending API request to: {descriptor.redacted_url}")

        try:
            response = await asyncio.wait_for(self.transport.get(descriptor.url), timeout=timeout)
        except asyncio.TimeoutError as e:
            self.logger.error(f"Request to {descriptor.redacted_url} timed out after {timeout}s")
            raise TransportError(f"Request timed out after {timeout}s") from e
        except TransportError:
            self.logger.error(f"Request to {descriptor.redacted_url} failed")
            raise
        except Exception as e:
            # injected transports may raise their own exception types
            self.logger.error(f"Request to {descriptor.redacted_url} failed: {e!r}")
            raise TransportError(f"Request failed: {e}") from e

        if not response.is_success:
            self.logger.warning(
                f"Non-success status {response.status} from {descriptor.redacted_url}, decoding body anyway"
            )
        return response
