from pydantic import BaseModel, ConfigDict, Field

from core.environment.config import GENERAL_CREDENTIAL_SOURCE, Settings
from core.environment.credentials import CredentialReader, resolve_credential


DEFAULT_BASE_URL = "https://api.covalenthq.com/v1"


class ClientConfiguration(BaseModel):
    """
    Immutable identity of one client binding.

    ``chain_id`` is only the default chain: every client operation accepts an
    explicit chain identifier, so the configuration never has to change
    while requests are in flight.

    Attributes
    ----------
    base_url : str
        API base URL without trailing slash
    chain_id : str
        Default chain identifier
    credential : str
        API key sent as the ``key`` query parameter
    """
    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    chain_id: str = Field(..., min_length=1)
    credential: str = Field(..., min_length=1, repr=False)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def create(
        cls,
        chain_id: str,
        credential: str | None = None,
        source: str = GENERAL_CREDENTIAL_SOURCE,
        base_url: str = DEFAULT_BASE_URL,
        reader: CredentialReader | None = None
    ) -> "ClientConfiguration":
        """
        Build a configuration, resolving the credential if none is passed.

        Parameters
        ----------
        chain_id : str
            Default chain identifier
        credential : str | None
            Explicit API key
        source : str
            Named source consulted when ``credential`` is None
        base_url : str
            API base URL
        reader : CredentialReader | None
            Source reader, the process environment by default

        Returns
        -------
        ClientConfiguration
            Configuration instance

        Raises
        ------
        CredentialMissing
            If no credential can be found
        CredentialInvalid
            If the source value is not text
        """
        return cls(
            base_url=base_url.rstrip("/"),
            chain_id=chain_id,
            credential=resolve_credential(credential, source=source, reader=reader)
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        credential: str | None = None,
        reader: CredentialReader | None = None
    ) -> "ClientConfiguration":
        """
        Build a configuration from application settings.

        Parameters
        ----------
        settings : Settings
            Application settings
        credential : str | None
            Explicit API key overriding the configured source
        reader : CredentialReader | None
            Source reader, the process environment by default

        Returns
        -------
        ClientConfiguration
            Configuration instance
        """
        return cls.create(
            chain_id=settings.covalent_chain_id,
            credential=credential,
            source=settings.covalent_credential_source,
            base_url=settings.covalent_base_url,
            reader=reader
        )
