import logging
from typing import Annotated, AsyncIterable

from dishka import FromComponent, Provider, Scope, provide

from core.environment.config import Settings
from covalent.client import CovalentClient
from covalent.configuration import ClientConfiguration
from covalent.decoder import ResourceDecoder
from covalent.transport import AiohttpTransport, HttpTransport, RequestExecutor


class CovalentProvider(Provider):
    """
    Provider for Covalent client dependencies.

    Parameters
    ----------
    transport : HttpTransport | None
        Transport to provide instead of an aiohttp one; the caller keeps
        ownership of it
    """

    component = "covalent"

    def __init__(self, transport: HttpTransport | None = None):
        super().__init__()
        self._transport = transport

    @provide(scope=Scope.APP)
    async def get_transport(self) -> AsyncIterable[HttpTransport]:
        """
        Provide the HTTP transport, closing it on container shutdown.

        Yields
        ------
        HttpTransport
            Transport instance
        """
        if self._transport is not None:
            yield self._transport
            return

        transport = AiohttpTransport()
        try:
            yield transport
        finally:
            await transport.close()

    @provide(scope=Scope.APP)
    def get_configuration(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> ClientConfiguration:
        """
        Provide the client configuration, resolving the credential once.

        Parameters
        ----------
        settings : Settings
            Application settings

        Returns
        -------
        ClientConfiguration
            Client configuration
        """
        return ClientConfiguration.from_settings(settings)

    @provide(scope=Scope.APP)
    def get_executor(
        self,
        transport: Annotated[HttpTransport, FromComponent("covalent")],
        settings: Annotated[Settings, FromComponent("environment")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> RequestExecutor:
        """
        Provide the request executor.

        Parameters
        ----------
        transport : HttpTransport
            HTTP transport
        settings : Settings
            Application settings
        logger : logging.Logger
            Logger instance

        Returns
        -------
        RequestExecutor
            Request executor
        """
        return RequestExecutor(
            transport=transport,
            logger=logger,
            timeout=settings.covalent_request_timeout
        )

    @provide(scope=Scope.APP)
    def get_decoder(
        self,
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> ResourceDecoder:
        return ResourceDecoder(logger)

    @provide(scope=Scope.APP)
    def get_client(
        self,
        configuration: Annotated[ClientConfiguration, FromComponent("covalent")],
        executor: Annotated[RequestExecutor, FromComponent("covalent")],
        decoder: Annotated[ResourceDecoder, FromComponent("covalent")],
        logger: Annotated[logging.Logger, FromComponent("logger")]
    ) -> CovalentClient:
        """
        Provide the Covalent client.

        The transport belongs to the container, not to the client.

        Returns
        -------
        CovalentClient
            Client instance
        """
        return CovalentClient(
            configuration=configuration,
            executor=executor,
            decoder=decoder,
            logger=logger
        )
