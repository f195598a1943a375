"""
Pagination helpers for list endpoints.

List endpoints answer either with a Spring-style page envelope
(``{"content": [...], "last": false, "totalPages": 3, ...}``) or with a bare
JSON array. Both shapes are resolved once, at the client boundary, into a
tagged union so callers never inspect raw payloads.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class PageEnvelope(BaseModel):
    """One page of a paginated listing."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    kind: Literal["page"] = "page"
    content: list[Any]
    total_elements: int | None = None
    total_pages: int | None = None
    number: int | None = None
    size: int | None = None
    last: bool = False

    def is_final(self, page_index: int) -> bool:
        """
        Decide whether this page ends the listing.

        Args:
            page_index: Zero-based index of this page in the request sequence

        Returns:
            True if the server flagged the last page, returned no items, or
            the index reached the reported page count

        Examples:
            >>> PageEnvelope(content=[1], last=True).is_final(0)
            True

            >>> PageEnvelope(content=[1], last=False, total_pages=3).is_final(1)
            False
        """
        if self.last or not self.content:
            return True
        return self.total_pages is not None and page_index + 1 >= self.total_pages


class BareArrayPage(BaseModel):
    """A bare JSON array; always the single, complete page."""

    kind: Literal["bare"] = "bare"
    content: list[Any]

    def is_final(self, page_index: int) -> bool:  # noqa: ARG002
        return True


Page = Annotated[PageEnvelope | BareArrayPage, Field(discriminator="kind")]

_page_adapter: TypeAdapter[PageEnvelope | BareArrayPage] = TypeAdapter(Page)


def resolve_page_shape(payload: Any) -> PageEnvelope | BareArrayPage:  # noqa: ANN401
    """
    Resolve a decoded JSON payload into a page envelope or bare-array page.

    Args:
        payload: Decoded response body

    Returns:
        PageEnvelope for ``{"content": [...]}`` bodies, BareArrayPage for lists

    Raises:
        UnexpectedPageShapeError: If the payload is neither shape
        pydantic.ValidationError: If envelope metadata has the wrong types

    Examples:
        >>> resolve_page_shape([{"id": 1}]).kind
        'bare'

        >>> resolve_page_shape({"content": [], "last": True}).kind
        'page'
    """
    if isinstance(payload, list):
        tagged: dict[str, Any] = {"kind": "bare", "content": payload}
    elif isinstance(payload, dict) and isinstance(payload.get("content"), list):
        tagged = {**payload, "kind": "page"}
    else:
        raise UnexpectedPageShapeError(type(payload).__name__)
    return _page_adapter.validate_python(tagged)


def build_page_params(page: int, size: int) -> dict[str, int]:
    """
    Build query parameters for one page request.

    Examples:
        >>> build_page_params(2, 100)
        {'page': 2, 'size': 100}
    """
    return {"page": page, "size": size}


# Custom domain exceptions


class InfrastructureFetchError(Exception):
    """Base exception for failures that abort an infrastructure fetch."""

    pass


class UnexpectedPageShapeError(InfrastructureFetchError):
    """Raised when a list endpoint returns neither a page envelope nor an array."""

    def __init__(self, received_type: str) -> None:
        self.received_type = received_type
        super().__init__(f"Expected a page envelope or JSON array, got {received_type}.")


class PageFetchError(InfrastructureFetchError):
    """
    Raised when any page of a listing cannot be fetched or decoded.

    The whole aggregation fails; partial listings are never returned.
    """

    def __init__(self, endpoint: str, page: int, reason: str) -> None:
        self.endpoint = endpoint
        self.page = page
        self.reason = reason
        super().__init__(f"Failed to fetch page {page} of '{endpoint}': {reason}")
