"""
Inbound action payloads for the two editors. Every body carries an
``actionType`` discriminator (resolved by the routers); field names are
camelCase on the wire.
"""

from pydantic import Field
from typing import List, Literal, Optional, Union

from app.models.metadata import CamelModel, ImageUnit, MetadataUnit


# ---------------------------------------------------------
# Meta title / description editor
# ---------------------------------------------------------
class GenerateMetadataAction(CamelModel):
    action_type: Literal["generate"]
    product_id: str = Field(min_length=1)
    product_title: str = Field(min_length=1)
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None

    def to_unit(self) -> MetadataUnit:
        return MetadataUnit(
            product_id=self.product_id,
            title=self.product_title,
            current_meta_title=self.meta_title or "",
            current_meta_description=self.meta_description or "",
        )


class MetadataUpdate(CamelModel):
    product_id: str = Field(min_length=1)
    meta_title: str = ""
    meta_description: str = ""
    title: str = ""

    def to_unit(self) -> MetadataUnit:
        return MetadataUnit(
            product_id=self.product_id,
            title=self.title,
            edited_meta_title=self.meta_title,
            edited_meta_description=self.meta_description,
        )


class UpdateMetadataAction(MetadataUpdate):
    action_type: Literal["update"]


class BulkUpdateMetadataAction(CamelModel):
    action_type: Literal["bulkUpdate"]
    updates: List[MetadataUpdate] = Field(min_length=1)


class MetadataProductRef(CamelModel):
    id: str = Field(min_length=1)
    title: str

    def to_unit(self) -> MetadataUnit:
        return MetadataUnit(product_id=self.id, title=self.title)


class BulkGenerateMetadataAction(CamelModel):
    action_type: Literal["bulkGenerateAndUpdateAll"]
    products: List[MetadataProductRef] = Field(min_length=1)


MetadataAction = Union[
    GenerateMetadataAction, UpdateMetadataAction, BulkUpdateMetadataAction, BulkGenerateMetadataAction
]


# ---------------------------------------------------------
# Image alt text editor
# ---------------------------------------------------------
class ImageProductRef(CamelModel):
    product_id: str = Field(min_length=1)
    image_id: str = Field(min_length=1)
    product_title: str = Field(min_length=1)
    product_description: Optional[str] = None
    product_type: Optional[str] = None
    vendor: Optional[str] = None
    image_url: Optional[str] = None
    alt_text: Optional[str] = None

    def to_unit(self) -> ImageUnit:
        return ImageUnit(
            product_id=self.product_id,
            image_id=self.image_id,
            title=self.product_title,
            description=self.product_description or "",
            product_type=self.product_type or "N/A",
            vendor=self.vendor or "N/A",
            image_url=self.image_url or "",
            current_alt_text=self.alt_text or "",
        )


class GenerateAltTextAction(ImageProductRef):
    action_type: Literal["generate"]


class AltTextUpdate(CamelModel):
    product_id: str = Field(min_length=1)
    image_id: str = Field(min_length=1)
    alt_text: str = ""
    title: str = ""

    def to_unit(self) -> ImageUnit:
        return ImageUnit(
            product_id=self.product_id,
            image_id=self.image_id,
            title=self.title,
            edited_alt_text=self.alt_text,
        )


class UpdateAltTextAction(AltTextUpdate):
    action_type: Literal["update"]


class BulkUpdateAltTextAction(CamelModel):
    action_type: Literal["bulkUpdate"]
    updates: List[AltTextUpdate] = Field(min_length=1)


class BulkGenerateAltTextAction(CamelModel):
    action_type: Literal["bulkGenerateAndUpdateAll"]
    products: List[ImageProductRef] = Field(min_length=1)


AltTextAction = Union[
    GenerateAltTextAction, UpdateAltTextAction, BulkUpdateAltTextAction, BulkGenerateAltTextAction
]
