import json
import logging
from typing import Any

from pydantic import ValidationError

from core.exceptions import DecodeError
from covalent.envelope import (
    ERROR_FIELDS,
    PAGINATION_FIELDS,
    ErrorOverlay,
    PaginationOverlay,
    ResourceData,
    ResourceEnvelope,
)
from covalent.variants import ResourceVariant, get_variant


def _field_path(error: ValidationError, prefix: str | None = None) -> str | None:
    errors = error.errors()
    if not errors:
        return prefix
    loc = [str(part) for part in errors[0]["loc"]]
    if prefix:
        loc.insert(0, prefix)
    return ".".join(loc) or None


class ResourceDecoder:
    """
    Decoder of flat API responses into typed envelopes.

    The wire object mixes three groups at its top level: the resource under
    ``data``, the error overlay, and the pagination overlay. Decoding runs in
    two passes: the body is parsed generically, the overlay fields are
    projected out, and only then is the remaining ``data`` object validated
    against the variant's model.

    Parameters
    ----------
    logger : logging.Logger
        Logger instance
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def decode(
        self,
        variant: ResourceVariant | str,
        body: bytes | str,
        status: int | None = None
    ) -> ResourceEnvelope:
        """
        Decode a response body.

        Parameters
        ----------
        variant : ResourceVariant | str
            Resource variant or its name
        body : bytes | str
            Raw response body
        status : int | None
            HTTP status, used for logging only

        Returns
        -------
        ResourceEnvelope
            Envelope parameterized with the variant's data model

        Raises
        ------
        DecodeError
            If the body is not a JSON object, the ``error`` flag is missing,
            or a successful response lacks valid ``data``
        """
        if isinstance(variant, str):
            variant = get_variant(variant)

        payload = self._parse(variant, body)
        error = self._project_error(variant, payload)
        raw_data = payload.get("data")
        pagination = self._project_pagination(variant, payload, raw_data)

        if error.error:
            self.logger.warning(
                f"API reported an error for {variant.name} (status {status}): "
                f"{error.error_code} {error.error_message}"
            )
            data = self._decode_partial(variant, raw_data, pagination)
        else:
            data = self._decode_data(variant, raw_data, pagination)

        return ResourceEnvelope[variant.model](data=data, error=error)

    def _parse(self, variant: ResourceVariant, body: bytes | str) -> dict[str, Any]:
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(variant.name, message=f"Response for {variant.name} is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise DecodeError(variant.name, message=f"Response for {variant.name} is not a JSON object")
        return payload

    def _project_error(self, variant: ResourceVariant, payload: dict[str, Any]) -> ErrorOverlay:
        if "error" not in payload:
            raise DecodeError(variant.name, field="error")

        overlay = {key: payload[key] for key in ERROR_FIELDS if key in payload}
        try:
            return ErrorOverlay.model_validate(overlay)
        except ValidationError as e:
            raise DecodeError(variant.name, field=_field_path(e)) from e

    def _project_pagination(
        self,
        variant: ResourceVariant,
        payload: dict[str, Any],
        raw_data: Any
    ) -> PaginationOverlay | None:
        # top level wins; some endpoint versions nest the fields under data
        sources = [payload]
        if isinstance(raw_data, dict):
            if isinstance(raw_data.get("pagination"), dict):
                sources.append(raw_data["pagination"])
            sources.append(raw_data)

        overlay: dict[str, Any] = {}
        for source in sources:
            for key in PAGINATION_FIELDS:
                if key not in overlay and source.get(key) is not None:
                    overlay[key] = source[key]

        if not overlay:
            return None
        try:
            return PaginationOverlay.model_validate(overlay)
        except ValidationError as e:
            raise DecodeError(variant.name, field=_field_path(e)) from e

    def _validate(
        self,
        variant: ResourceVariant,
        raw_data: dict[str, Any],
        pagination: PaginationOverlay | None
    ) -> ResourceData:
        fields = {
            key: value for key, value in raw_data.items()
            if key not in PAGINATION_FIELDS and key != "pagination"
        }
        fields["pagination"] = pagination
        return variant.model.model_validate(fields)

    def _decode_data(
        self,
        variant: ResourceVariant,
        raw_data: Any,
        pagination: PaginationOverlay | None
    ) -> ResourceData:
        if not isinstance(raw_data, dict):
            raise DecodeError(variant.name, field="data")
        try:
            return self._validate(variant, raw_data, pagination)
        except ValidationError as e:
            raise DecodeError(variant.name, field=_field_path(e, "data")) from e

    def _decode_partial(
        self,
        variant: ResourceVariant,
        raw_data: Any,
        pagination: PaginationOverlay | None
    ) -> ResourceData | None:
        if not isinstance(raw_data, dict):
            return None
        try:
            return self._validate(variant, raw_data, pagination)
        except ValidationError as e:
            self.logger.debug(f"Dropping partial {variant.name} data: {e}")
            return None
