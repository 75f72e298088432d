"""Multipart form bodies for listing create/update requests."""

from dataclasses import dataclass, field

from curl_cffi import CurlMime

from listings_mcp.models import ImageUpload, ListingDraft, format_price

IMAGE_FIELD = "images"


@dataclass
class MultipartForm:
    """Ordered text fields plus file parts.

    The transport leaves the Content-Type header to curl so the boundary is
    set correctly.
    """

    fields: list[tuple[str, str]] = field(default_factory=list)
    files: list[tuple[str, ImageUpload]] = field(default_factory=list)

    def append(self, name: str, value: str) -> None:
        self.fields.append((name, value))

    def attach(self, name: str, upload: ImageUpload) -> None:
        self.files.append((name, upload))

    def to_curl_mime(self) -> CurlMime:
        mime = CurlMime()
        for name, value in self.fields:
            mime.addpart(name=name, data=value.encode("utf-8"))
        for name, upload in self.files:
            mime.addpart(
                name=name,
                content_type=upload.content_type,
                filename=upload.filename,
                data=upload.content,
            )
        return mime


def build_listing_form(draft: ListingDraft, image: ImageUpload | None = None) -> MultipartForm:
    form = MultipartForm()
    form.append("title", draft.title)
    form.append("description", draft.description or "")
    form.append("location_address", draft.location_address)
    form.append("price", format_price(draft.price))
    form.append("property_type", draft.property_type.value)
    form.append("status", draft.status.value)
    if image is not None:
        form.attach(IMAGE_FIELD, image)
    return form
