import re
from typing import Any, AsyncIterator, Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from covalent.envelope import PaginationOverlay, ResourceEnvelope


_DECIMAL = re.compile(r"[0-9]+")


class PaginationParams(BaseModel):
    """
    Page size and number sent with a request.

    Absent fields are omitted from the query string entirely.

    Attributes
    ----------
    page_size : str | None
        Number of items per page
    page_number : str | None
        Zero-based page index
    """
    page_size: str | None = None
    page_number: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("page_size", "page_number", mode="before")
    @classmethod
    def as_decimal_string(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Pagination values must be numbers")
        if isinstance(v, int):
            if v < 0:
                raise ValueError("Pagination values must not be negative")
            return str(v)
        if isinstance(v, str) and not _DECIMAL.fullmatch(v):
            raise ValueError("Pagination values must be non-negative decimal numbers")
        return v


class PaginationCursor(BaseModel):
    """
    Page-size/page-number state of a pagination sequence.

    The cursor never moves by itself: ``next`` returns a new cursor for the
    following page, or None when the previous page said there is no more.
    """
    page_size: int | None = Field(default=None, ge=0)
    page_number: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(frozen=True)

    @property
    def params(self) -> PaginationParams:
        return PaginationParams(page_size=self.page_size, page_number=self.page_number)

    def next(self, overlay: PaginationOverlay | None) -> "PaginationCursor | None":
        """
        Cursor for the page after the one described by ``overlay``.

        Parameters
        ----------
        overlay : PaginationOverlay | None
            Pagination overlay of the previous response

        Returns
        -------
        PaginationCursor | None
            Next cursor, None when ``has_more`` is not true
        """
        if overlay is None or not overlay.has_more:
            return None

        current = self.page_number
        if current is None:
            current = overlay.page_number if overlay.page_number is not None else 0
        page_size = self.page_size if self.page_size is not None else overlay.page_size
        return PaginationCursor(page_size=page_size, page_number=current + 1)


PageFetcher = Callable[[PaginationParams], Awaitable[ResourceEnvelope]]


class Pages:
    """
    Lazy, restartable sequence of pages.

    Every ``async for`` starts again from the initial cursor and issues one
    request per step. Iteration ends after a page without ``has_more`` or
    with an API error. Pages are not buffered.

    Parameters
    ----------
    fetch : PageFetcher
        Coroutine function issuing one request for given pagination params
    cursor : PaginationCursor
        Initial cursor
    """

    def __init__(self, fetch: PageFetcher, cursor: PaginationCursor | None = None):
        self.fetch = fetch
        self.cursor = cursor or PaginationCursor()

    def __aiter__(self) -> AsyncIterator[ResourceEnvelope]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ResourceEnvelope]:
        cursor: PaginationCursor | None = self.cursor
        while cursor is not None:
            envelope = await self.fetch(cursor.params)
            yield envelope
            if envelope.error.error:
                return
            cursor = cursor.next(envelope.pagination)
