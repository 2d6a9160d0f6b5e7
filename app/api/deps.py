from fastapi import Depends
from typing import Callable

from app.core.config import GenerationConfig, Settings, ShopifyConfig, settings
from app.services.batch_runner import PacedBatchRunner
from app.services.generation_service import TextGenerationService
from app.services.mutation_service import ProductMutationService
from app.services.page_fetcher import ProductPageFetcher
from app.services.shopify_client import ShopifyGraphQLClient

GenerationFactory = Callable[[], TextGenerationService]


def get_settings() -> Settings:
    return settings


def get_shopify_client(s: Settings = Depends(get_settings)) -> ShopifyGraphQLClient:
    return ShopifyGraphQLClient(ShopifyConfig.from_settings(s))


def get_page_fetcher(client: ShopifyGraphQLClient = Depends(get_shopify_client)) -> ProductPageFetcher:
    return ProductPageFetcher(client)


def get_mutation_service(client: ShopifyGraphQLClient = Depends(get_shopify_client)) -> ProductMutationService:
    return ProductMutationService(client)


def get_generation_factory(s: Settings = Depends(get_settings)) -> GenerationFactory:
    # Built on demand so update-only actions work without Azure credentials.
    def build() -> TextGenerationService:
        return TextGenerationService(GenerationConfig.from_settings(s))

    return build


def get_update_runner(s: Settings = Depends(get_settings)) -> PacedBatchRunner:
    return PacedBatchRunner(s.BULK_UPDATE_BATCH_SIZE, s.INTER_REQUEST_DELAY)


def get_generate_runner(s: Settings = Depends(get_settings)) -> PacedBatchRunner:
    return PacedBatchRunner(s.BULK_GENERATE_BATCH_SIZE, s.INTER_REQUEST_DELAY)
