"""
Pytest configuration and shared fixtures for Product SEO Toolkit tests.
"""

import os

# Keep test runs from writing logs/app.log
os.environ.setdefault("LOG_FILE", "")

import json
import httpx
import pytest

from app.core.config import GenerationConfig, Settings, ShopifyConfig
from app.models.metadata import ImageUnit, MetadataUnit


# ============================================================================
# HTTP STUBS
# ============================================================================

class StubAPI:
    """
    Replays queued responses through an httpx.MockTransport and records
    every request. A queued item may be a dict (JSON body, status 200), an
    httpx.Response, an exception instance (raised), or a callable taking the
    parsed request body.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests = []
        self.bodies = []

    def queue(self, *responses):
        self.responses.extend(responses)

    @property
    def call_count(self):
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append(request)
        self.bodies.append(body)

        if not self.responses:
            raise AssertionError(f"Unexpected request to {request.url}")
        item = self.responses.pop(0)

        if callable(item) and not isinstance(item, type):
            item = item(body)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return httpx.Response(200, json=item)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def completion(content):
    """Azure OpenAI chat completion envelope around ``content``."""
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"total_tokens": 42},
    }


def media_update_ok(body):
    media = body["variables"]["media"][0]
    return {"data": {"productUpdateMedia": {"media": [{"id": media["id"], "alt": media["alt"]}], "mediaUserErrors": []}}}


def product_update_ok(body):
    data = body["variables"]["input"]
    return {"data": {"productUpdate": {"product": {"id": data["id"], "seo": data["seo"]}, "userErrors": []}}}


def user_errors(*messages):
    errors = [{"field": ["media"], "message": m} for m in messages]
    return {"data": {"productUpdateMedia": {"media": None, "mediaUserErrors": errors}}}


def product_node(n, media_count=0):
    return {
        "id": f"gid://shopify/Product/{n}",
        "title": f"Product {n}",
        "handle": f"product-{n}",
        "description": f"Description {n}",
        "productType": "Tools",
        "vendor": "Acme",
        "featuredImage": None,
        "seo": {"title": f"Meta {n}", "description": None},
        "media": {"edges": [
            {"node": {
                "id": f"gid://shopify/MediaImage/{n}{m}",
                "alt": "",
                "mediaContentType": "IMAGE",
                "image": {"url": f"https://cdn.example.com/{n}-{m}.jpg"},
            }}
            for m in range(media_count)
        ]},
    }


def listing(nodes, has_next, end_cursor=None):
    return {"data": {"products": {
        "pageInfo": {"hasNextPage": has_next, "endCursor": end_cursor},
        "edges": [{"cursor": f"c-{node['id']}", "node": node} for node in nodes],
    }}}


# ============================================================================
# CONFIG FIXTURES
# ============================================================================

@pytest.fixture
def shopify_config():
    return ShopifyConfig(
        store_domain="test-shop.myshopify.com",
        access_token="shpat_test_token_1234",
        api_version="2025-01",
    )


@pytest.fixture
def generation_config():
    return GenerationConfig(
        endpoint="https://example-oai.openai.azure.com/",
        api_key="azure-test-key-5678",
        api_version="2024-06-01",
        deployment="gpt-4o",
    )


@pytest.fixture
def test_settings():
    return Settings(
        SHOPIFY_STORE_DOMAIN="test-shop.myshopify.com",
        SHOPIFY_ACCESS_TOKEN="shpat_test_token_1234",
        SHOPIFY_API_VERSION="2025-01",
        AZURE_OAI_ENDPOINT="https://example-oai.openai.azure.com/",
        AZURE_OAI_KEY="azure-test-key-5678",
        AZURE_OAI_API_VERSION="2024-06-01",
        AZURE_OAI_DEPLOYMENT_NAME="gpt-4o",
        INTER_REQUEST_DELAY=0,
        LOG_FILE="",
    )


# ============================================================================
# SAMPLE DATA FIXTURES
# ============================================================================

@pytest.fixture
def image_unit():
    return ImageUnit(
        product_id="gid://shopify/Product/1001",
        image_id="gid://shopify/MediaImage/2001",
        title="Cordless Drill 18V",
        description="Compact drill with two batteries",
        product_type="Power Tools",
        vendor="Acme",
        image_url="https://cdn.example.com/drill.jpg",
        current_alt_text="drill",
    )


@pytest.fixture
def metadata_unit():
    return MetadataUnit(
        product_id="gid://shopify/Product/1001",
        title="Cordless Drill 18V",
        current_meta_title="Cordless Drill",
        current_meta_description="A drill.",
    )


@pytest.fixture
def image_units():
    return [
        ImageUnit(
            product_id=f"gid://shopify/Product/{n}",
            image_id=f"gid://shopify/MediaImage/{n}00",
            title=f"Product {n}",
            current_alt_text=f"alt {n}",
        )
        for n in (1, 2, 3)
    ]


@pytest.fixture
def shopify_api():
    return StubAPI()


@pytest.fixture
def openai_api():
    return StubAPI()
