import os
from pydantic_settings import BaseSettings, SettingsConfigDict


GENERAL_CREDENTIAL_SOURCE = "COVALENT_API_KEY"
SERVICE_CREDENTIAL_SOURCE = "COVALENT_SIFTER_API_KEY"


class Settings(BaseSettings):
    """
    Application settings using Pydantic Settings.

    The API credential is deliberately not a field here: it is resolved once,
    from the environment variable named by ``covalent_credential_source``.

    Attributes
    ----------
    covalent_base_url : str
        Base URL of the Covalent API (version segment included)
    covalent_chain_id : str
        Default chain identifier (8217 is the Klaytn mainnet)
    covalent_credential_source : str
        Name of the environment variable holding the API key
    covalent_request_timeout : float | None
        Per-request timeout in seconds, unbounded when unset
    log_level : str
        Root logging level
    """

    covalent_base_url: str = "https://api.covalenthq.com/v1"
    covalent_chain_id: str = "8217"
    covalent_credential_source: str = GENERAL_CREDENTIAL_SOURCE
    covalent_request_timeout: float | None = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
