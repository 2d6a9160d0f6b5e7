from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union

META_TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MAX_LENGTH = 160
ALT_TEXT_MAX_LENGTH = 125

MEDIA_IMAGE_GID_PREFIX = "gid://shopify/MediaImage/"
PRODUCT_GID_PREFIX = "gid://shopify/Product/"


def clamp(value: Optional[str], limit: int) -> str:
    return (value or "")[:limit]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MetadataUnit(CamelModel):
    """One product whose SEO title/description can be generated or updated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    product_id: str
    title: str
    current_meta_title: str = ""
    current_meta_description: str = ""
    edited_meta_title: Optional[str] = None
    edited_meta_description: Optional[str] = None
    handle: Optional[str] = None
    featured_image_url: Optional[str] = None
    featured_image_alt: Optional[str] = None

    @field_validator("edited_meta_title")
    @classmethod
    def clamp_title(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else clamp(v, META_TITLE_MAX_LENGTH)

    @field_validator("edited_meta_description")
    @classmethod
    def clamp_description(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else clamp(v, META_DESCRIPTION_MAX_LENGTH)

    @property
    def key(self) -> str:
        return self.product_id

    @property
    def label(self) -> str:
        return f"Product {self.product_id}"

    @property
    def meta_title(self) -> str:
        value = self.edited_meta_title if self.edited_meta_title is not None else self.current_meta_title
        return clamp(value, META_TITLE_MAX_LENGTH)

    @property
    def meta_description(self) -> str:
        value = (
            self.edited_meta_description
            if self.edited_meta_description is not None
            else self.current_meta_description
        )
        return clamp(value, META_DESCRIPTION_MAX_LENGTH)

    def with_overrides(self, meta_title: Optional[str] = None, meta_description: Optional[str] = None) -> "MetadataUnit":
        data = self.model_dump()
        if meta_title is not None:
            data["edited_meta_title"] = meta_title
        if meta_description is not None:
            data["edited_meta_description"] = meta_description
        return MetadataUnit.model_validate(data)


class ImageUnit(CamelModel):
    """One product image whose alt text can be generated or updated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    product_id: str
    image_id: str
    title: str
    description: str = ""
    product_type: str = "N/A"
    vendor: str = "N/A"
    image_url: str = ""
    current_alt_text: str = ""
    edited_alt_text: Optional[str] = None

    @field_validator("edited_alt_text")
    @classmethod
    def clamp_alt_text(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else clamp(v, ALT_TEXT_MAX_LENGTH)

    @property
    def key(self) -> str:
        return f"{self.product_id}_{self.image_id}"

    @property
    def label(self) -> str:
        return f"Image {self.key}"

    @property
    def alt_text(self) -> str:
        value = self.edited_alt_text if self.edited_alt_text is not None else self.current_alt_text
        return clamp(value, ALT_TEXT_MAX_LENGTH)

    def with_overrides(self, alt_text: Optional[str] = None) -> "ImageUnit":
        data = self.model_dump()
        if alt_text is not None:
            data["edited_alt_text"] = alt_text
        return ImageUnit.model_validate(data)


Unit = Union[MetadataUnit, ImageUnit]


class GeneratedAltText(CamelModel):
    alt_text: str
    raw: Optional[str] = None
    parsed: bool = True


class GeneratedMetadata(CamelModel):
    meta_title: str
    meta_description: str
    raw: Optional[str] = None
    parsed: bool = True


class Page(CamelModel):
    """One fetched page of units. Superseded, never mutated, on re-fetch."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    units: List[Unit]
    cursor: Optional[str] = None
    has_next: bool = False
    page_number: int = 1
    total_images: Optional[int] = None
