from abc import ABC


class BaseCustomException(Exception, ABC):
    """
    Base class for all custom exceptions.
    """

    def __init__(self, message: str | None = None):
        self.message = message or self.get_default_message()
        super().__init__(self.message)

    def get_default_message(self) -> str:
        """
        Return default error message.

        Returns
        -------
        str
            Default error message
        """
        return "error.unknown"

    def get_status_code(self) -> int:
        """
        Return HTTP status code for exception.

        Returns
        -------
        int
            HTTP status code
        """
        return 500


class BadRequestException(BaseCustomException):
    """Bad request exception (400)."""

    def get_status_code(self) -> int:
        return 400


class BadGatewayException(BaseCustomException):
    """Upstream API failure exception (502)."""

    def get_status_code(self) -> int:
        return 502


class InvalidParameterException(BadRequestException):
    """Empty required parameter or unknown path token."""

    def get_default_message(self) -> str:
        return "error.parameter.invalid"


class ConfigurationException(BaseCustomException):
    """Client could not be configured."""

    def get_default_message(self) -> str:
        return "error.configuration.invalid"


class CredentialMissing(ConfigurationException):
    """No credential passed and the named source is absent or blank."""

    def __init__(self, source: str | None = None, message: str | None = None):
        self.source = source
        if message is None and source is not None:
            message = f"Required environment variable {source} is not present"
        super().__init__(message)

    def get_default_message(self) -> str:
        return "error.credential.missing"


class CredentialInvalid(ConfigurationException):
    """Credential source is present but not representable as text."""

    def __init__(self, source: str | None = None, message: str | None = None):
        self.source = source
        if message is None and source is not None:
            message = f"Environment variable {source} is not valid unicode"
        super().__init__(message)

    def get_default_message(self) -> str:
        return "error.credential.invalid"


class TransportError(BadGatewayException):
    """
    Network-level failure (connection, DNS, timeout).

    The underlying transport exception is kept as ``__cause__``.
    """

    def get_default_message(self) -> str:
        return "error.transport.failed"


class DecodeError(BadGatewayException):
    """
    Response body could not be decoded into the requested resource variant.

    Parameters
    ----------
    variant : str
        Resource variant name
    field : str | None
        Offending field path, where determinable
    message : str | None
        Optional message override
    """

    def __init__(self, variant: str, field: str | None = None, message: str | None = None):
        self.variant = variant
        self.field = field
        if message is None:
            message = f"Failed to decode {variant} response"
            if field:
                message = f"{message}: field '{field}'"
        super().__init__(message)

    def get_default_message(self) -> str:
        return "error.response.decode_failed"


class ApiLogicalError(BaseCustomException):
    """
    Logical failure reported by the API inside a decoded envelope.

    Never raised implicitly; see ``ResourceEnvelope.raise_for_error``.
    """

    def __init__(self, message: str | None = None, error_code: int | None = None):
        self.error_code = error_code
        super().__init__(message)

    def get_default_message(self) -> str:
        return "error.api.logical"

    def get_status_code(self) -> int:
        if self.error_code and 400 <= self.error_code < 600:
            return self.error_code
        return 502
