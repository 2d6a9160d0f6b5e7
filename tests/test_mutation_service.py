"""
Tests for app/services/mutation_service.py

Covers identifier validation, user-error handling and the one-write-per-call
contract of the remote mutation client.
"""

import asyncio
import httpx
import pytest

from conftest import media_update_ok, product_update_ok, user_errors
from app.models.metadata import ImageUnit, MetadataUnit
from app.models.outcome import RemoteFailure, Success, ValidationFailure
from app.services.mutation_service import ProductMutationService
from app.services.shopify_client import ShopifyGraphQLClient


@pytest.fixture
def service(shopify_config, shopify_api):
    return ProductMutationService(ShopifyGraphQLClient(shopify_config, transport=shopify_api.transport))


class TestAltTextUpdate:

    def test_success(self, service, shopify_api, image_unit):
        shopify_api.queue(media_update_ok)

        outcome = asyncio.run(service.update_unit(image_unit, {"alt_text": "Red cordless drill"}))

        assert isinstance(outcome, Success)
        assert outcome.value == {
            "productId": image_unit.product_id,
            "imageId": image_unit.image_id,
            "altText": "Red cordless drill",
        }
        variables = shopify_api.bodies[0]["variables"]
        assert variables == {
            "productId": image_unit.product_id,
            "media": [{"id": image_unit.image_id, "alt": "Red cordless drill"}],
        }

    def test_uses_edited_value_when_no_fields_given(self, service, shopify_api, image_unit):
        shopify_api.queue(media_update_ok)
        unit = image_unit.with_overrides(alt_text="edited alt")

        asyncio.run(service.update_unit(unit))

        assert shopify_api.bodies[0]["variables"]["media"][0]["alt"] == "edited alt"

    def test_invalid_image_prefix_makes_no_call(self, service, shopify_api, image_unit):
        unit = image_unit.model_copy(update={"image_id": "gid://shopify/Video/123"})

        outcome = asyncio.run(service.update_unit(unit, {"alt_text": "x"}))

        assert isinstance(outcome, ValidationFailure)
        assert "gid://shopify/MediaImage/" in outcome.reason
        assert shopify_api.call_count == 0

    def test_user_errors_are_joined(self, service, shopify_api, image_unit):
        shopify_api.queue(user_errors("Media not found", "Alt too long"))

        outcome = asyncio.run(service.update_unit(image_unit))

        assert isinstance(outcome, RemoteFailure)
        assert outcome.message == "Media not found, Alt too long"

    def test_empty_payload_is_failure(self, service, shopify_api, image_unit):
        shopify_api.queue({"data": {"productUpdateMedia": {"media": None, "mediaUserErrors": []}}})

        outcome = asyncio.run(service.update_unit(image_unit))

        assert isinstance(outcome, RemoteFailure)
        assert outcome.message == "Failed to update image alt text."

    def test_missing_mutation_payload(self, service, shopify_api, image_unit):
        shopify_api.queue({"data": {}})

        outcome = asyncio.run(service.update_unit(image_unit))

        assert outcome == RemoteFailure(message="Invalid response from API")

    @pytest.mark.parametrize("body", [b'[{"unexpected": true}]', b"null", b'{"data": ["not", "an", "object"]}'])
    def test_unexpected_envelope_is_failure(self, service, shopify_api, image_unit, body):
        shopify_api.queue(httpx.Response(200, content=body))

        outcome = asyncio.run(service.update_unit(image_unit))

        assert outcome == RemoteFailure(message="Shopify API returned an unexpected response.")

    def test_non_object_mutation_payload(self, service, shopify_api, image_unit):
        shopify_api.queue({"data": {"productUpdateMedia": ["odd"]}})

        outcome = asyncio.run(service.update_unit(image_unit))

        assert outcome == RemoteFailure(message="Invalid response from API")

    def test_transport_exception_is_failure(self, service, shopify_api, image_unit):
        shopify_api.queue(httpx.ReadTimeout("timed out"))

        outcome = asyncio.run(service.update_unit(image_unit))

        assert isinstance(outcome, RemoteFailure)
        assert "timed out" in outcome.message
        assert shopify_api.call_count == 1

    def test_long_alt_text_submitted_truncated(self, service, shopify_api, image_unit):
        shopify_api.queue(media_update_ok)

        outcome = asyncio.run(service.update_unit(image_unit, {"alt_text": "x" * 200}))

        sent = shopify_api.bodies[0]["variables"]["media"][0]["alt"]
        assert len(sent) == 125
        assert outcome.value["altText"] == sent

    def test_repeated_update_converges(self, service, shopify_api, image_unit):
        shopify_api.queue(media_update_ok, media_update_ok)

        first = asyncio.run(service.update_unit(image_unit, {"alt_text": "same"}))
        second = asyncio.run(service.update_unit(image_unit, {"alt_text": "same"}))

        assert first == second
        assert shopify_api.bodies[0]["variables"] == shopify_api.bodies[1]["variables"]


class TestMetadataUpdate:

    def test_success(self, service, shopify_api, metadata_unit):
        shopify_api.queue(product_update_ok)

        outcome = asyncio.run(service.update_unit(
            metadata_unit, {"meta_title": "Drill | Acme", "meta_description": "Buy the drill."}
        ))

        assert isinstance(outcome, Success)
        assert shopify_api.bodies[0]["variables"] == {"input": {
            "id": metadata_unit.product_id,
            "seo": {"title": "Drill | Acme", "description": "Buy the drill."},
        }}

    def test_falls_back_to_current_values(self, service, shopify_api, metadata_unit):
        shopify_api.queue(product_update_ok)

        asyncio.run(service.update_unit(metadata_unit))

        seo = shopify_api.bodies[0]["variables"]["input"]["seo"]
        assert seo == {"title": "Cordless Drill", "description": "A drill."}

    def test_clamps_title_and_description(self, service, shopify_api, metadata_unit):
        shopify_api.queue(product_update_ok)

        asyncio.run(service.update_unit(metadata_unit, {"meta_title": "t" * 80, "meta_description": "d" * 300}))

        seo = shopify_api.bodies[0]["variables"]["input"]["seo"]
        assert len(seo["title"]) == 60
        assert len(seo["description"]) == 160

    def test_user_errors(self, service, shopify_api, metadata_unit):
        shopify_api.queue({"data": {"productUpdate": {
            "product": None,
            "userErrors": [{"field": ["seo"], "message": "Title is invalid"}],
        }}})

        outcome = asyncio.run(service.update_unit(metadata_unit))

        assert outcome == RemoteFailure(message="Title is invalid")

    def test_invalid_product_id(self, service, shopify_api):
        unit = MetadataUnit(product_id="1001", title="Drill")

        outcome = asyncio.run(service.update_unit(unit))

        assert isinstance(outcome, ValidationFailure)
        assert shopify_api.call_count == 0


def test_metadata_update_with_list_body_is_failure(service, shopify_api, metadata_unit):
    shopify_api.queue(httpx.Response(200, json=[]))

    outcome = asyncio.run(service.update_unit(metadata_unit))

    assert isinstance(outcome, RemoteFailure)
    assert outcome.message == "Shopify API returned an unexpected response."
