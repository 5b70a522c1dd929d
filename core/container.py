from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from core.environment.config import Settings
from core.environment.providers import EnvironmentProvider
from core.logging.providers import LoggerProvider
from covalent.providers import CovalentProvider
from covalent.transport import HttpTransport


def create_container(
    settings: Settings | None = None,
    transport: HttpTransport | None = None
) -> AsyncContainer:
    """
    Build the application container.

    Parameters
    ----------
    settings : Settings | None
        Settings to use instead of reading the environment
    transport : HttpTransport | None
        Transport to use instead of aiohttp

    Returns
    -------
    AsyncContainer
        Dishka container
    """
    return make_async_container(
        FastapiProvider(),
        EnvironmentProvider(settings),
        LoggerProvider(),
        CovalentProvider(transport)
    )
