import re
from typing import Mapping

from pydantic import BaseModel, ConfigDict

from core.exceptions import InvalidParameterException
from covalent.pagination import PaginationParams


CREDENTIAL_PARAM = "key"
PAGE_SIZE_PARAM = "page-size"
PAGE_NUMBER_PARAM = "page-number"
REDACTED = "***"

_TOKEN = re.compile(r"\{(\w+)\}")


class EndpointDescriptor(BaseModel):
    """
    Request descriptor for a single API call.

    Attributes
    ----------
    base_url : str
        API base URL
    path : str
        Resource path relative to the base URL
    query : dict[str, str]
        Query parameters in wire order
    """
    base_url: str
    path: str
    query: dict[str, str]

    model_config = ConfigDict(frozen=True)

    def _render(self, query: Mapping[str, str]) -> str:
        pairs = "&".join(f"{key}={value}" for key, value in query.items())
        url = f"{self.base_url}/{self.path}"
        return f"{url}?{pairs}" if pairs else url

    @property
    def url(self) -> str:
        """Full request URL."""
        return self._render(self.query)

    @property
    def redacted_url(self) -> str:
        """Request URL with the credential masked, safe for logs."""
        query = dict(self.query)
        if CREDENTIAL_PARAM in query:
            query[CREDENTIAL_PARAM] = REDACTED
        return self._render(query)


def render_path(template: str, path_params: Mapping[str, str]) -> str:
    """
    Substitute ``{name}`` tokens of a path template.

    Values are inserted verbatim: the supported alphabet (hex addresses,
    decimal numbers, ISO dates) needs no escaping.

    Parameters
    ----------
    template : str
        Path template, e.g. ``{chain_id}/address/{address}/balances_v2/``
    path_params : Mapping[str, str]
        Token values

    Returns
    -------
    str
        Rendered path

    Raises
    ------
    InvalidParameterException
        If a token has no value
    """
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in path_params:
            raise InvalidParameterException(f"Missing path parameter '{name}' for '{template}'")
        return str(path_params[name])

    return _TOKEN.sub(substitute, template)


def build_endpoint(
    base_url: str,
    template: str,
    path_params: Mapping[str, str],
    query_params: Mapping[str, str | None],
    pagination: PaginationParams | None,
    credential: str
) -> EndpointDescriptor:
    """
    Compose the request descriptor for one call.

    Query order is fixed: resource parameters as given, then the credential,
    then ``page-size`` and ``page-number`` when present.

    Parameters
    ----------
    base_url : str
        API base URL
    template : str
        Resource path template
    path_params : Mapping[str, str]
        Values for the template tokens
    query_params : Mapping[str, str | None]
        Resource-specific query parameters, None values are omitted
    pagination : PaginationParams | None
        Page size and number
    credential : str
        API key

    Returns
    -------
    EndpointDescriptor
        New descriptor
    """
    query: dict[str, str] = {
        key: str(value) for key, value in query_params.items() if value is not None
    }
    query[CREDENTIAL_PARAM] = credential

    if pagination is not None:
        if pagination.page_size is not None:
            query[PAGE_SIZE_PARAM] = pagination.page_size
        if pagination.page_number is not None:
            query[PAGE_NUMBER_PARAM] = pagination.page_number

    return EndpointDescriptor(
        base_url=base_url.rstrip("/"),
        path=render_path(template, path_params),
        query=query
    )
