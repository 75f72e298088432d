"""Listings dashboard: table, filters, and admin add/edit/delete."""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from listings_mcp.api.multipart import build_listing_form
from listings_mcp.api.urls import CREATE_LISTING_PATH, LISTINGS_PATH, listing_path
from listings_mcp.models import (
    Capability,
    FilterState,
    HttpMethod,
    ImageUpload,
    Listing,
    ListingDraft,
    ListingPage,
    ListingsResponse,
    MessageResponse,
    Pagination,
)
from listings_mcp.screens.base import Screen, ScreenState, ValidationError
from listings_mcp.views import derive_page

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this listing?"

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]


def validate_draft(draft: ListingDraft) -> None:
    errors: dict[str, str] = {}
    if not draft.title.strip():
        errors["title"] = "Title is required"
    if not draft.location_address.strip():
        errors["location_address"] = "Address is required"
    if draft.price < 0:
        errors["price"] = "Price must be zero or more"
    if errors:
        raise ValidationError(errors)


class DashboardScreen(Screen):
    def __init__(self, page_size: Optional[int] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.listings_endpoint = self.endpoint(
            LISTINGS_PATH, HttpMethod.GET, response_model=ListingsResponse
        )
        self.save_endpoint = self.endpoint(CREATE_LISTING_PATH, HttpMethod.POST)
        self.delete_endpoint = self.endpoint(
            LISTINGS_PATH, HttpMethod.DELETE, response_model=MessageResponse
        )
        self.filters = FilterState()
        self.pagination = Pagination(page_size=page_size or self.client.config.default_page_size)

        self.form: Optional[ListingDraft] = None
        self.viewing: Optional[Listing] = None

    # --- Access ---

    @property
    def can_manage(self) -> bool:
        user = self.session.user
        return user is not None and user.can(Capability.MANAGE_LISTINGS)

    # --- Table ---

    async def load(self) -> None:
        await self.listings_endpoint.execute()
        if self.listings_endpoint.error is not None:
            self.alert = self.listings_endpoint.error

    @property
    def is_loading(self) -> bool:
        return self.listings_endpoint.is_loading

    @property
    def listings(self) -> list[Listing]:
        response: Optional[ListingsResponse] = self.listings_endpoint.data
        return response.listings if response is not None else []

    @property
    def page(self) -> ListingPage:
        return derive_page(self.listings, self.filters, self.pagination)

    def set_query(self, query: str) -> None:
        self.set_filters(query=query)

    def set_filters(self, **changes: Any) -> None:
        """Update search text or filters and go back to the first page."""
        self.filters = FilterState.model_validate({**self.filters.model_dump(), **changes})
        self.pagination = Pagination(page=0, page_size=self.pagination.page_size)

    def set_page(self, page: int) -> None:
        self.pagination = Pagination(page=page, page_size=self.pagination.page_size)

    def set_page_size(self, page_size: int) -> None:
        self.pagination = Pagination(page=0, page_size=page_size)

    # --- Forms ---

    def open_add(self) -> ListingDraft:
        self.form = ListingDraft()
        self.field_errors = {}
        return self.form

    def open_edit(self, listing: Listing) -> ListingDraft:
        self.form = ListingDraft.from_listing(listing)
        self.field_errors = {}
        return self.form

    def close_form(self) -> None:
        self.form = None

    def view(self, listing: Listing) -> Listing:
        self.viewing = listing
        return listing

    def close_view(self) -> None:
        self.viewing = None

    async def save(
        self, draft: Optional[ListingDraft] = None, image: Optional[ImageUpload] = None
    ) -> ScreenState:
        """Create or update a listing, then refetch the table."""
        draft = draft or self.form
        if draft is None:
            raise RuntimeError("No listing form is open")
        self.form = draft

        self.state = ScreenState.VALIDATING
        try:
            validate_draft(draft)
        except ValidationError as exc:
            self.field_errors = exc.field_errors
            self.state = ScreenState.IDLE
            return self.state
        self.field_errors = {}
        self.alert = None

        if draft.id:
            url, method = listing_path(draft.id), HttpMethod.PUT
        else:
            url, method = CREATE_LISTING_PATH, HttpMethod.POST

        self.state = ScreenState.SUBMITTING
        await self.save_endpoint.execute(url, build_listing_form(draft, image), method)
        if not self.mounted:
            return self.state
        if self.save_endpoint.error is not None:
            self.fail(self.save_endpoint.error)
            return self.state

        logger.info("Saved listing %s", draft.id or draft.title)
        await self.load()
        self.close_form()
        self.state = ScreenState.SUCCESS
        return self.state

    async def delete(self, listing_id: str, confirm: Confirm) -> ScreenState:
        """Delete a listing after the user confirms, then refetch the table."""
        answer = confirm(DELETE_PROMPT)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return self.state

        self.alert = None
        self.state = ScreenState.SUBMITTING
        await self.delete_endpoint.execute(
            listing_path(listing_id), None, HttpMethod.DELETE
        )
        if not self.mounted:
            return self.state
        if self.delete_endpoint.error is not None:
            self.fail(self.delete_endpoint.error)
            return self.state

        logger.info("Deleted listing %s", listing_id)
        await self.load()
        self.state = ScreenState.SUCCESS
        return self.state
