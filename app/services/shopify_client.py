import httpx
from loguru import logger
from typing import Any, Dict, Optional

from app.core.config import ShopifyConfig
from app.core.exceptions import ShopifyAPIError
from app.utils.masking import mask_secret


class ShopifyGraphQLClient:
    """Posts GraphQL documents to the Shopify Admin API, one request per call."""

    def __init__(self, config: ShopifyConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

        self.headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": config.access_token,
        }
        logger.info(
            f"🔑 Shopify client initialized | Store: {config.store_domain} | "
            f"Token: {mask_secret(config.access_token)}"
        )

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run one query or mutation and return its ``data`` object.

        Transport failures, non-200 responses and top-level GraphQL
        ``errors`` all raise ShopifyAPIError. No retries are attempted.
        """
        payload = {"query": query, "variables": variables or {}}

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.config.graphql_url,
                    headers=self.headers,
                    json=payload
                )
        except httpx.HTTPError as e:
            logger.error(f"❌ Shopify request failed: {e}")
            raise ShopifyAPIError(f"Request to Shopify failed: {e}") from e

        if response.status_code == 429:
            logger.warning("⏳ Shopify rate limit reached.")
            raise ShopifyAPIError("Shopify API rate limit exceeded (429).")

        if response.status_code != 200:
            logger.error(f"❌ Shopify API Error ({response.status_code}): {response.text}")
            raise ShopifyAPIError(f"Shopify API returned status {response.status_code}.")

        try:
            result = response.json()
        except ValueError as e:
            raise ShopifyAPIError("Shopify API returned a non-JSON response.") from e

        if not isinstance(result, dict) or not isinstance(result.get("data") or {}, dict):
            raise ShopifyAPIError("Shopify API returned an unexpected response.")

        errors = result.get("errors")
        if errors:
            if isinstance(errors, list):
                message = ", ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
            else:
                message = str(errors)
            logger.error(f"❌ GraphQL errors: {message}")
            raise ShopifyAPIError(message)

        cost = (result.get("extensions") or {}).get("cost") or {}
        if cost:
            logger.debug(f"📊 Query cost: {cost.get('actualQueryCost', cost.get('requestedQueryCost'))}")

        return result.get("data") or {}
