import logging
import sys
from typing import Annotated, TextIO

from dishka import FromComponent, Provider, Scope, provide

from core.environment.config import Settings


LOGGER_NAME = "covalent_client"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", stream: TextIO = sys.stdout) -> logging.Logger:
    """
    Configure console logging once and return the client logger.

    Parameters
    ----------
    level : str
        Logging level name
    stream : TextIO
        Stream the handler writes to

    Returns
    -------
    logging.Logger
        Logger that writes to the stream
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format=LOG_FORMAT,
            handlers=[
                logging.StreamHandler(stream)
            ]
        )

    return logging.getLogger(LOGGER_NAME)


class LoggerProvider(Provider):
    """
    Provider for logging configuration and logger instances.

    Configures logging to output to console (stdout) at the level from settings.
    """
    component = "logger"

    @provide(scope=Scope.APP)
    def get_logger(
        self,
        settings: Annotated[Settings, FromComponent("environment")]
    ) -> logging.Logger:
        """
        Provide configured logger instance.

        Parameters
        ----------
        settings : Settings
            Application settings

        Returns
        -------
        logging.Logger
            Configured logger that writes to console
        """
        return configure_logging(settings.log_level)
