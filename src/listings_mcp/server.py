"""Listings MCP server: sign in and manage real-estate listings."""

import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from fastmcp import FastMCP

from listings_mcp.api.client import get_client
from listings_mcp.models import (
    Capability,
    ImageUpload,
    Listing,
    ListingStatus,
    PropertyType,
)
from listings_mcp.routes import Navigator
from listings_mcp.screens import DashboardScreen, LoginScreen, RegistrationScreen, ScreenState
from listings_mcp.screens.dashboard import DELETE_PROMPT
from listings_mcp.session import get_session
from listings_mcp.shell import NavigationShell

# Route ALL logging to stderr; stdout is reserved for MCP protocol messages
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

ADMIN_REQUIRED = "Admin role required"
INVALID_PAGINATION = "page must be 0 or more and page_size must be 1 or more"

mcp = FastMCP(
    name="listings",
    instructions=(
        "Listings MCP server for a real-estate listings dashboard. "
        "Use login or register first; the session is remembered between calls. "
        "Use list_listings to search, filter and page through listings, and "
        "get_listing for a single listing. Admins can create_listing, "
        "update_listing and delete_listing."
    ),
)


def _screen_kwargs() -> dict:
    client = get_client()
    session = get_session(client.config)
    return {"client": client, "session": session, "navigator": Navigator(session)}


def _failure(screen, **extra) -> dict:
    result = {"error": screen.alert or "Please fill all required fields correctly."}
    if screen.field_errors:
        result["field_errors"] = screen.field_errors
    result.update(extra)
    return result


def _read_image(image_path: str) -> ImageUpload:
    path = Path(image_path).expanduser()
    content_type, _ = mimetypes.guess_type(path.name)
    return ImageUpload(
        filename=path.name,
        content=path.read_bytes(),
        content_type=content_type or "application/octet-stream",
    )


async def _open_dashboard(**kwargs) -> DashboardScreen:
    dashboard = DashboardScreen(**_screen_kwargs(), **kwargs)
    await dashboard.load()
    return dashboard


def _find(dashboard: DashboardScreen, listing_id: str) -> Optional[Listing]:
    for listing in dashboard.listings:
        if listing.id == listing_id:
            return listing
    return None


@mcp.tool()
async def login(username: str, password: str, remember_me: bool = False) -> dict:
    """Sign in and remember the session for later calls.

    Args:
        username: Username or email address.
        password: Account password.
        remember_me: Ask the server for a long-lived session.

    Returns:
        The signed-in user, or an error message with field errors.
    """
    logger.info("login called: username=%s", username)
    screen = LoginScreen(**_screen_kwargs())
    screen.username, screen.password, screen.remember_me = username, password, remember_me
    try:
        if await screen.submit() != ScreenState.SUCCESS:
            return _failure(screen)
        return {"user": screen.user.model_dump(), "route": screen.navigator.current}
    finally:
        screen.unmount()


@mcp.tool()
async def register(username: str, full_name: str, password: str) -> dict:
    """Create an account and sign in with it.

    Args:
        username: Username or email address.
        full_name: Name shown next to the avatar.
        password: Account password.

    Returns:
        The signed-in user, or an error message with field errors.
    """
    logger.info("register called: username=%s", username)
    screen = RegistrationScreen(**_screen_kwargs())
    screen.username, screen.full_name, screen.password = username, full_name, password
    try:
        if await screen.submit() != ScreenState.SUCCESS:
            return _failure(screen)
        return {"user": screen.user.model_dump(), "route": screen.navigator.current}
    finally:
        screen.unmount()


@mcp.tool()
async def logout() -> dict:
    """Sign out and forget the stored session."""
    logger.info("logout called")
    shell = NavigationShell(**_screen_kwargs())
    route = await shell.logout()
    return {"logged_out": True, "route": route}


@mcp.tool()
async def whoami() -> dict:
    """Show the signed-in user and what they are allowed to do."""
    shell = NavigationShell(**_screen_kwargs())
    user = shell.user
    if user is None:
        return {"user": None, "label": "", "can_manage_listings": False}
    return {
        "user": user.model_dump(),
        "label": shell.identity_label,
        "can_manage_listings": shell.can(Capability.MANAGE_LISTINGS),
    }


@mcp.tool()
async def list_listings(
    query: str = "",
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    property_type: Optional[PropertyType] = None,
    status: Optional[ListingStatus] = None,
    page: int = 0,
    page_size: Optional[int] = None,
) -> dict:
    """Search, filter and page through listings.

    Args:
        query: Text matched against title, address, property type, status and price.
        min_price: Minimum price.
        max_price: Maximum price.
        property_type: Apartment, House or Commercial.
        status: For Sale or For Rent.
        page: Zero-based page index.
        page_size: Listings per page (defaults to the configured page size).

    Returns:
        One page of listings with the total number of matches.
    """
    logger.info("list_listings called: query=%r, page=%d", query, page)
    if page < 0 or (page_size is not None and page_size < 1):
        return {"error": INVALID_PAGINATION, "items": []}
    dashboard = await _open_dashboard(page_size=page_size)
    try:
        if dashboard.alert:
            return {"error": dashboard.alert, "items": []}
        dashboard.set_filters(
            query=query,
            min_price=min_price,
            max_price=max_price,
            property_type=property_type,
            status=status,
        )
        dashboard.set_page(page)
        return dashboard.page.model_dump(mode="json")
    finally:
        dashboard.unmount()


@mcp.tool()
async def get_listing(listing_id: str) -> dict:
    """Get a single listing with its image URLs.

    Args:
        listing_id: Identifier of the listing.
    """
    logger.info("get_listing called: %s", listing_id)
    dashboard = await _open_dashboard()
    try:
        if dashboard.alert:
            return {"error": dashboard.alert, "id": listing_id}
        listing = _find(dashboard, listing_id)
        if listing is None:
            return {"error": f"Listing {listing_id} not found", "id": listing_id}
        return dashboard.view(listing).model_dump(mode="json")
    finally:
        dashboard.unmount()


@mcp.tool()
async def create_listing(
    title: str,
    location_address: str,
    price: float,
    property_type: PropertyType = PropertyType.APARTMENT,
    status: ListingStatus = ListingStatus.FOR_SALE,
    description: str = "",
    image_path: Optional[str] = None,
) -> dict:
    """Add a new listing (admins only).

    Args:
        title: Listing title.
        location_address: Street address.
        price: Asking price or rent.
        property_type: Apartment, House or Commercial.
        status: For Sale or For Rent.
        description: Free-form description.
        image_path: Optional local image file to upload.
    """
    logger.info("create_listing called: title=%s", title)
    dashboard = DashboardScreen(**_screen_kwargs())
    try:
        if not dashboard.can_manage:
            return {"error": ADMIN_REQUIRED}
        draft = dashboard.open_add().model_copy(
            update={
                "title": title,
                "location_address": location_address,
                "price": price,
                "property_type": PropertyType(property_type),
                "status": ListingStatus(status),
                "description": description,
            }
        )
        image = _read_image(image_path) if image_path else None
        if await dashboard.save(draft, image) != ScreenState.SUCCESS:
            return _failure(dashboard)
        return {"saved": True, "listing": dashboard.save_endpoint.data, "total": len(dashboard.listings)}
    except OSError as e:
        logger.error("create_listing image error: %s", e)
        return {"error": f"Could not read image: {e}"}
    finally:
        dashboard.unmount()


@mcp.tool()
async def update_listing(
    listing_id: str,
    title: Optional[str] = None,
    location_address: Optional[str] = None,
    price: Optional[float] = None,
    property_type: Optional[PropertyType] = None,
    status: Optional[ListingStatus] = None,
    description: Optional[str] = None,
    image_path: Optional[str] = None,
) -> dict:
    """Edit an existing listing (admins only). Omitted fields keep their value.

    Args:
        listing_id: Identifier of the listing.
        title: New title.
        location_address: New street address.
        price: New price.
        property_type: Apartment, House or Commercial.
        status: For Sale or For Rent.
        description: New description.
        image_path: Optional local image file to upload.
    """
    logger.info("update_listing called: %s", listing_id)
    dashboard = DashboardScreen(**_screen_kwargs())
    try:
        if not dashboard.can_manage:
            return {"error": ADMIN_REQUIRED}
        await dashboard.load()
        if dashboard.alert:
            return {"error": dashboard.alert, "id": listing_id}
        listing = _find(dashboard, listing_id)
        if listing is None:
            return {"error": f"Listing {listing_id} not found", "id": listing_id}

        changes = {
            "title": title,
            "location_address": location_address,
            "price": price,
            "property_type": PropertyType(property_type) if property_type else None,
            "status": ListingStatus(status) if status else None,
            "description": description,
        }
        draft = dashboard.open_edit(listing).model_copy(
            update={k: v for k, v in changes.items() if v is not None}
        )
        image = _read_image(image_path) if image_path else None
        if await dashboard.save(draft, image) != ScreenState.SUCCESS:
            return _failure(dashboard, id=listing_id)
        return {"saved": True, "id": listing_id, "listing": dashboard.save_endpoint.data}
    except OSError as e:
        logger.error("update_listing image error: %s", e)
        return {"error": f"Could not read image: {e}", "id": listing_id}
    finally:
        dashboard.unmount()


@mcp.tool()
async def delete_listing(listing_id: str, confirm: bool = False) -> dict:
    """Delete a listing (admins only). Nothing is sent unless confirm is true.

    Args:
        listing_id: Identifier of the listing.
        confirm: Must be true to actually delete.
    """
    logger.info("delete_listing called: %s, confirm=%s", listing_id, confirm)
    dashboard = DashboardScreen(**_screen_kwargs())
    try:
        if not dashboard.can_manage:
            return {"error": ADMIN_REQUIRED}
        state = await dashboard.delete(listing_id, lambda prompt: confirm)
        if not confirm:
            return {"deleted": False, "id": listing_id, "prompt": DELETE_PROMPT}
        if state != ScreenState.SUCCESS:
            return _failure(dashboard, id=listing_id)
        return {"deleted": True, "id": listing_id, "total": len(dashboard.listings)}
    finally:
        dashboard.unmount()


def main() -> None:
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
