from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from core.exceptions import ApiLogicalError


ERROR_FIELDS = ("error", "error_message", "error_code")
PAGINATION_FIELDS = ("has_more", "page_number", "page_size", "total_count")


class ErrorOverlay(BaseModel):
    """
    Error fields the API flattens next to every resource.

    Attributes
    ----------
    error : bool
        True when the API reports a logical failure
    error_message : str | None
        Human readable message
    error_code : int | None
        API error code
    """
    error: bool = False
    error_message: str | None = None
    error_code: int | None = None


class PaginationOverlay(BaseModel):
    """
    Pagination fields flattened next to a resource.

    Page number and size are normalized to integers, whichever way the
    endpoint happens to encode them.
    """
    has_more: bool | None = None
    page_number: int | None = None
    page_size: int | None = None
    total_count: int | None = None


class ResourceData(BaseModel):
    """
    Base of every resource variant's ``data`` object.

    Unknown wire fields are ignored so that new API fields never break
    decoding.
    """
    pagination: PaginationOverlay | None = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResourceModel(BaseModel):
    """Base of item shapes nested inside resource data."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


T = TypeVar("T", bound=ResourceData)


class ResourceEnvelope(BaseModel, Generic[T]):
    """
    Decoded resource plus its error overlay.

    ``data`` is always present when ``error.error`` is false and may be
    missing when the API reports an error.
    """
    data: T | None = None
    error: ErrorOverlay

    @property
    def ok(self) -> bool:
        return not self.error.error

    @property
    def pagination(self) -> PaginationOverlay | None:
        if self.data is None:
            return None
        return self.data.pagination

    def raise_for_error(self) -> "ResourceEnvelope[T]":
        """
        Raise if the API reported a logical error.

        Returns
        -------
        ResourceEnvelope[T]
            The envelope itself, for chaining

        Raises
        ------
        ApiLogicalError
            If ``error.error`` is true
        """
        if self.error.error:
            raise ApiLogicalError(self.error.error_message, error_code=self.error.error_code)
        return self

    def to_wire(self) -> dict[str, Any]:
        """
        Flatten back into the API's wire shape.

        Only declared model fields are emitted, under their wire names;
        excluded and unknown upstream fields are not reproduced.

        Returns
        -------
        dict[str, Any]
            ``{"data": {...}, "error": ..., "error_message": ..., ...}``
        """
        wire: dict[str, Any] = {"data": None}
        if self.data is not None:
            wire["data"] = self.data.model_dump(
                mode="json", by_alias=True, exclude={"pagination"}
            )
        wire.update(self.error.model_dump(mode="json"))

        pagination = self.pagination
        if pagination is not None:
            wire.update(pagination.model_dump(mode="json"))
        return wire
