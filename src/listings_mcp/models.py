"""Pydantic data models for listings, sessions and list views."""

import json
import logging
import re
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class PropertyType(str, Enum):
    APARTMENT = "Apartment"
    HOUSE = "House"
    COMMERCIAL = "Commercial"


class ListingStatus(str, Enum):
    FOR_SALE = "For Sale"
    FOR_RENT = "For Rent"


class Capability(str, Enum):
    MANAGE_LISTINGS = "manage-listings"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def parse(cls, label: Optional[str]) -> Optional["Role"]:
        """Map a stored role label to a Role, or None for unknown labels."""
        if not label:
            return None
        try:
            return cls(label.strip().lower())
        except ValueError:
            return None

    def can(self, capability: Capability) -> bool:
        return capability in _ROLE_CAPABILITIES[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset({Capability.MANAGE_LISTINGS}),
    Role.USER: frozenset(),
}


def normalize_images(raw: Any) -> list[str]:
    """Resolve the images field to an ordered list of URL strings.

    The API sends either a list of URLs or the same list JSON-encoded as a
    string. Anything that does not decode to a list becomes an empty list.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, (list, tuple)):
        return []
    return [item for item in raw if isinstance(item, str)]


def format_price(price: float) -> str:
    """Render a price the way it is searched and submitted.

    Plain decimal notation from 1e-6 up to 1e21, shortest exponent
    notation outside that range.

    Examples:
        250000.0 -> "250000"
        1500.5   -> "1500.5"
        0.000015 -> "0.000015"
        1e21     -> "1e+21"
    """
    value = float(price)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(text), "f")
    return re.sub(r"e([+-])0*(\d)", r"e\1\2", text)


class Listing(BaseModel):
    """A single property listing as returned by the API."""

    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    location_address: str
    price: float = Field(ge=0)
    property_type: PropertyType
    status: ListingStatus
    images: list[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("images", mode="before")
    @classmethod
    def _normalize_images(cls, value: Any) -> list[str]:
        return normalize_images(value)


class ListingDraft(BaseModel):
    """Add/edit form state for a listing."""

    id: Optional[str] = None
    title: str = ""
    description: Optional[str] = ""
    location_address: str = ""
    price: float = 0
    property_type: PropertyType = PropertyType.APARTMENT
    status: ListingStatus = ListingStatus.FOR_SALE
    images: list[str] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def _normalize_images(cls, value: Any) -> list[str]:
        return normalize_images(value)

    @classmethod
    def from_listing(cls, listing: Listing) -> "ListingDraft":
        return cls.model_validate(listing.model_dump())


class ImageUpload(BaseModel):
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class FilterState(BaseModel):
    """Search text and filter bounds applied to the listings table."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    property_type: Optional[PropertyType] = None
    status: Optional[ListingStatus] = None


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=5, ge=1)


class ListingPage(BaseModel):
    """One page of the filtered listings table."""

    items: list[Listing] = Field(default_factory=list)
    total: int = 0
    page: int = 0
    page_size: int = 5
    empty_message: Optional[str] = None


class SessionUser(BaseModel):
    """The signed-in user as persisted in the session store."""

    id: str
    email: str
    role: str
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def access_role(self) -> Optional[Role]:
        return Role.parse(self.role)

    def can(self, capability: Capability) -> bool:
        role = self.access_role
        return role is not None and role.can(capability)


class AuthResponse(BaseModel):
    """Payload of /api/login and /api/register."""

    access_token: Optional[str] = None
    user: Optional[SessionUser] = None
    error: Optional[str] = None
    message: Optional[str] = None


class ListingsResponse(BaseModel):
    listings: list[Listing] = Field(default_factory=list)

    @field_validator("listings", mode="before")
    @classmethod
    def _drop_invalid(cls, value: Any) -> Any:
        """Keep the records that validate; skip the rest with a warning."""
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        kept = []
        for index, record in enumerate(value):
            try:
                kept.append(Listing.model_validate(record))
            except ValidationError as exc:
                record_id = record.get("id") if isinstance(record, dict) else None
                logger.warning(
                    "Skipping listing %s at index %d: %d validation error(s)",
                    record_id, index, exc.error_count(),
                )
        return kept


class MessageResponse(BaseModel):
    message: Optional[str] = None
