"""Filtering and pagination of the listings table."""

from typing import Any, Iterable, Sequence

from listings_mcp.models import (
    FilterState,
    Listing,
    ListingPage,
    Pagination,
    format_price,
)

EMPTY_MESSAGE = "No listings found."


def matches(listing: Listing, filters: FilterState) -> bool:
    """Return True when a listing passes the search text and every set filter."""
    query = filters.query.lower()
    searchable = (
        listing.title,
        listing.location_address,
        listing.property_type.value,
        listing.status.value,
    )
    if not (
        any(query in text.lower() for text in searchable)
        or query in format_price(listing.price)
    ):
        return False

    if filters.min_price is not None and listing.price < filters.min_price:
        return False
    if filters.max_price is not None and listing.price > filters.max_price:
        return False
    if filters.property_type is not None and listing.property_type != filters.property_type:
        return False
    if filters.status is not None and listing.status != filters.status:
        return False
    return True


def filter_listings(listings: Iterable[Listing], filters: FilterState) -> list[Listing]:
    return [listing for listing in listings if matches(listing, filters)]


def paginate(items: Sequence[Listing], pagination: Pagination) -> list[Listing]:
    """Slice out one page; a page past the end is empty."""
    start = pagination.page * pagination.page_size
    return list(items[start:start + pagination.page_size])


def coerce_listings(records: Iterable[Listing | dict[str, Any]]) -> list[Listing]:
    return [
        record if isinstance(record, Listing) else Listing.model_validate(record)
        for record in records
    ]


def derive_page(
    records: Iterable[Listing | dict[str, Any]],
    filters: FilterState | None = None,
    pagination: Pagination | None = None,
) -> ListingPage:
    """Filter and paginate records into the page shown in the table.

    Raw dict records are validated into Listing first, which normalizes
    their images field. Input order is preserved.
    """
    filters = filters or FilterState()
    pagination = pagination or Pagination()

    filtered = filter_listings(coerce_listings(records), filters)
    items = paginate(filtered, pagination)
    return ListingPage(
        items=items,
        total=len(filtered),
        page=pagination.page,
        page_size=pagination.page_size,
        empty_message=None if items else EMPTY_MESSAGE,
    )
