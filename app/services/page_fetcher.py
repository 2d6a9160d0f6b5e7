from loguru import logger
from pydantic import ValidationError
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.core.exceptions import PageLoadError, ShopifyAPIError
from app.models.metadata import ImageUnit, MetadataUnit, Page, Unit
from app.services.shopify_client import ShopifyGraphQLClient

# Fixed by the Admin API query cost budget, not tunable per request.
MEDIA_PER_PRODUCT = 10

PRODUCT_SEO_QUERY = """
query ($first: Int!, $after: String) {
  products(first: $first, after: $after) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      cursor
      node {
        id
        title
        handle
        featuredImage {
          url
          altText
        }
        seo {
          title
          description
        }
      }
    }
  }
}
"""

PRODUCT_MEDIA_QUERY = """
query ($first: Int!, $after: String, $mediaFirst: Int!) {
  products(first: $first, after: $after) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      cursor
      node {
        id
        title
        description
        productType
        vendor
        media(first: $mediaFirst) {
          edges {
            node {
              id
              alt
              mediaContentType
              ... on MediaImage {
                image {
                  url
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

NodeMapper = Callable[[Dict[str, Any]], List[Unit]]


def metadata_units_from_node(node: Dict[str, Any]) -> List[Unit]:
    seo = node.get("seo") or {}
    featured = node.get("featuredImage") or {}
    return [MetadataUnit(
        product_id=node["id"],
        title=node["title"],
        handle=node.get("handle"),
        current_meta_title=seo.get("title") or "",
        current_meta_description=seo.get("description") or "",
        featured_image_url=featured.get("url"),
        featured_image_alt=featured.get("altText") or f"Image of {node['title']}",
    )]


def image_units_from_node(node: Dict[str, Any]) -> List[Unit]:
    units = []
    for edge in node["media"]["edges"]:
        media = edge["node"]
        if media.get("mediaContentType", "IMAGE") != "IMAGE":
            continue
        units.append(ImageUnit(
            product_id=node["id"],
            image_id=media["id"],
            title=node["title"],
            description=node.get("description") or "",
            product_type=node.get("productType") or "N/A",
            vendor=node.get("vendor") or "N/A",
            image_url=(media.get("image") or {}).get("url") or "",
            current_alt_text=media.get("alt") or "",
        ))
    return units


class ProductPageFetcher:
    """Cursor-paginated, forward-only product listing."""

    def __init__(self, client: ShopifyGraphQLClient):
        self.client = client

    async def fetch_metadata_page(self, cursor: Optional[str] = None, page_size: int = 20, page_number: int = 1) -> Page:
        return await self._fetch(PRODUCT_SEO_QUERY, {}, metadata_units_from_node, cursor, page_size, page_number)

    async def fetch_image_page(self, cursor: Optional[str] = None, page_size: int = 30, page_number: int = 1) -> Page:
        page = await self._fetch(
            PRODUCT_MEDIA_QUERY,
            {"mediaFirst": MEDIA_PER_PRODUCT},
            image_units_from_node,
            cursor,
            page_size,
            page_number,
        )
        return page.model_copy(update={"total_images": len(page.units)})

    async def fetch_all_metadata(self, page_size: int = 20) -> Page:
        return await self._fetch_all(self.fetch_metadata_page, page_size)

    async def fetch_all_images(self, page_size: int = 30) -> Page:
        page = await self._fetch_all(self.fetch_image_page, page_size)
        return page.model_copy(update={"total_images": len(page.units)})

    async def _fetch_all(self, fetch_page: Callable[..., Awaitable[Page]], page_size: int) -> Page:
        units: List[Unit] = []
        cursor = None
        page_number = 1
        while True:
            page = await fetch_page(cursor=cursor, page_size=page_size, page_number=page_number)
            units.extend(page.units)
            if not page.has_next:
                break
            if not page.cursor:
                raise PageLoadError("Listing reported another page but returned no cursor")
            cursor = page.cursor
            page_number += 1

        logger.info(f"📚 Fetched all {page_number} pages | {len(units)} units")
        return Page(units=units, cursor=None, has_next=False, page_number=1)

    async def _fetch(
        self,
        query: str,
        extra_variables: Dict[str, Any],
        to_units: NodeMapper,
        cursor: Optional[str],
        page_size: int,
        page_number: int,
    ) -> Page:
        variables = {"first": page_size, "after": cursor, **extra_variables}

        try:
            data = await self.client.execute(query, variables)
        except ShopifyAPIError as e:
            raise PageLoadError(str(e)) from e

        products = data.get("products")
        if not products:
            raise PageLoadError("Invalid response from Shopify API")

        try:
            page_info = products["pageInfo"]
            has_next = bool(page_info["hasNextPage"])
            units: List[Unit] = []
            for edge in products["edges"]:
                units.extend(to_units(edge["node"]))
        except (KeyError, TypeError) as e:
            raise PageLoadError(f"Malformed product listing: missing {e}") from e
        except ValidationError as e:
            raise PageLoadError(f"Malformed product listing: {e.error_count()} invalid field(s)") from e

        next_cursor = page_info.get("endCursor") if has_next else None
        logger.info(f"📄 Loaded page {page_number} | {len(units)} units | has next: {has_next}")
        return Page(units=units, cursor=next_cursor, has_next=has_next, page_number=page_number)
