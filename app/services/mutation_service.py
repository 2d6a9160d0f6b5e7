from loguru import logger
from typing import Any, Dict, Optional

from app.core.exceptions import ShopifyAPIError
from app.models.metadata import (
    ALT_TEXT_MAX_LENGTH,
    META_DESCRIPTION_MAX_LENGTH,
    META_TITLE_MAX_LENGTH,
    MEDIA_IMAGE_GID_PREFIX,
    PRODUCT_GID_PREFIX,
    ImageUnit,
    MetadataUnit,
    Unit,
    clamp,
)
from app.models.outcome import Outcome, RemoteFailure, Success, ValidationFailure
from app.services.shopify_client import ShopifyGraphQLClient

PRODUCT_SEO_UPDATE_MUTATION = """
mutation productUpdate($input: ProductInput!) {
  productUpdate(input: $input) {
    product {
      id
      seo {
        title
        description
      }
    }
    userErrors {
      field
      message
    }
  }
}
"""

PRODUCT_MEDIA_UPDATE_MUTATION = """
mutation productUpdateMedia($productId: ID!, $media: [UpdateMediaInput!]!) {
  productUpdateMedia(productId: $productId, media: $media) {
    media {
      id
      alt
    }
    mediaUserErrors {
      field
      message
    }
  }
}
"""


class ProductMutationService:
    """
    Writes one unit back to Shopify per call.

    Identifiers are checked before anything is sent; every failure comes back
    as an Outcome rather than an exception. No retries are made here.
    """

    def __init__(self, client: ShopifyGraphQLClient):
        self.client = client

    async def update_unit(self, unit: Unit, fields: Optional[Dict[str, Any]] = None) -> Outcome:
        fields = fields or {}
        if isinstance(unit, ImageUnit):
            return await self.update_alt_text(unit, fields.get("alt_text"))
        return await self.update_metadata(
            unit,
            meta_title=fields.get("meta_title"),
            meta_description=fields.get("meta_description"),
        )

    async def update_metadata(
        self,
        unit: MetadataUnit,
        meta_title: Optional[str] = None,
        meta_description: Optional[str] = None,
    ) -> Outcome:
        if not unit.product_id.startswith(PRODUCT_GID_PREFIX):
            return ValidationFailure(reason=f"Invalid product ID format. Expected {PRODUCT_GID_PREFIX}...")

        title = clamp(unit.meta_title if meta_title is None else meta_title, META_TITLE_MAX_LENGTH)
        description = clamp(
            unit.meta_description if meta_description is None else meta_description,
            META_DESCRIPTION_MAX_LENGTH,
        )

        variables = {
            "input": {
                "id": unit.product_id,
                "seo": {"title": title, "description": description},
            }
        }

        try:
            data = await self.client.execute(PRODUCT_SEO_UPDATE_MUTATION, variables)
        except ShopifyAPIError as e:
            logger.error(f"❌ Metadata update failed for {unit.product_id}: {e}")
            return RemoteFailure(message=str(e))

        payload = data.get("productUpdate")
        if not isinstance(payload, dict):
            return RemoteFailure(message="Invalid response from API")

        user_errors = payload.get("userErrors") or []
        if user_errors:
            message = ", ".join(e.get("message", "") if isinstance(e, dict) else str(e) for e in user_errors)
            logger.warning(f"⚠ User errors for {unit.product_id}: {message}")
            return RemoteFailure(message=message)

        if not payload.get("product"):
            return RemoteFailure(message="Failed to update product metadata.")

        logger.success(f"✅ Metadata updated: {unit.product_id}")
        return Success(value={
            "productId": unit.product_id,
            "metaTitle": title,
            "metaDescription": description,
        })

    async def update_alt_text(self, unit: ImageUnit, alt_text: Optional[str] = None) -> Outcome:
        if not unit.image_id.startswith(MEDIA_IMAGE_GID_PREFIX):
            return ValidationFailure(reason=f"Invalid image ID format. Expected {MEDIA_IMAGE_GID_PREFIX}...")
        if not unit.product_id.startswith(PRODUCT_GID_PREFIX):
            return ValidationFailure(reason=f"Invalid product ID format. Expected {PRODUCT_GID_PREFIX}...")

        alt = clamp(unit.alt_text if alt_text is None else alt_text, ALT_TEXT_MAX_LENGTH)
        variables = {
            "productId": unit.product_id,
            "media": [{"id": unit.image_id, "alt": alt}],
        }

        try:
            data = await self.client.execute(PRODUCT_MEDIA_UPDATE_MUTATION, variables)
        except ShopifyAPIError as e:
            logger.error(f"❌ Alt text update failed for {unit.key}: {e}")
            return RemoteFailure(message=str(e))

        payload = data.get("productUpdateMedia")
        if not isinstance(payload, dict):
            return RemoteFailure(message="Invalid response from API")

        user_errors = payload.get("mediaUserErrors") or []
        if user_errors:
            message = ", ".join(e.get("message", "") if isinstance(e, dict) else str(e) for e in user_errors)
            logger.warning(f"⚠ Media user errors for {unit.key}: {message}")
            return RemoteFailure(message=message)

        if not payload.get("media"):
            return RemoteFailure(message="Failed to update image alt text.")

        logger.success(f"✅ Alt text updated: {unit.key}")
        return Success(value={
            "productId": unit.product_id,
            "imageId": unit.image_id,
            "altText": alt,
        })
