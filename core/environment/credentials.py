import os
from typing import Any, Callable

from core.environment.config import GENERAL_CREDENTIAL_SOURCE
from core.exceptions import CredentialInvalid, CredentialMissing


CredentialReader = Callable[[str], Any]


def read_environment(name: str) -> str | None:
    """
    Read a named value from the process environment.

    Parameters
    ----------
    name : str
        Environment variable name

    Returns
    -------
    str | None
        Raw value, None if the variable is not set
    """
    return os.environ.get(name)


def _as_text(value: Any, source: str) -> str:
    if isinstance(value, bytes):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CredentialInvalid(source) from e
    if not isinstance(value, str):
        raise CredentialInvalid(source)
    try:
        # undecodable environment bytes surface as lone surrogates
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise CredentialInvalid(source) from e
    return value


def resolve_credential(
    credential: str | None = None,
    source: str = GENERAL_CREDENTIAL_SOURCE,
    reader: CredentialReader | None = None
) -> str:
    """
    Resolve the API credential.

    An explicit credential wins. Otherwise the named source is read exactly
    once through ``reader`` (the process environment by default).

    Parameters
    ----------
    credential : str | None
        Explicit credential
    source : str
        Name of the configuration value to read when no credential is passed
    reader : CredentialReader | None
        Callable returning the raw value for a name, or None if absent

    Returns
    -------
    str
        Credential text

    Raises
    ------
    CredentialMissing
        If the source is absent or blank
    CredentialInvalid
        If the value is not representable as text
    """
    if credential is not None:
        value = _as_text(credential, "credential")
        if not value.strip():
            raise CredentialMissing(message="Explicit credential is empty")
        return value

    reader = reader or read_environment
    raw = reader(source)
    if raw is None:
        raise CredentialMissing(source)

    value = _as_text(raw, source)
    if not value.strip():
        raise CredentialMissing(source)
    return value
