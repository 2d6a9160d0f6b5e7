from fastapi import APIRouter, Body, Depends, Query
from loguru import logger
from typing import Annotated, Optional

from app.api.deps import (
    GenerationFactory,
    get_generate_runner,
    get_generation_factory,
    get_mutation_service,
    get_page_fetcher,
    get_settings,
    get_update_runner,
)
from app.api.responses import bulk_response, failure_response, page_response
from app.core.config import Settings
from app.models.actions import (
    BulkGenerateMetadataAction,
    BulkUpdateMetadataAction,
    GenerateMetadataAction,
    MetadataAction,
    UpdateMetadataAction,
)
from app.models.batch import BatchMode
from app.services.batch_runner import PacedBatchRunner, generate_then_update
from app.services.mutation_service import ProductMutationService
from app.services.page_fetcher import ProductPageFetcher

router = APIRouter()


@router.get("/products")
async def list_products(
    page: int = Query(1, ge=1),
    cursor: Optional[str] = None,
    fetch_all: bool = Query(False, alias="fetchAll"),
    fetcher: ProductPageFetcher = Depends(get_page_fetcher),
    s: Settings = Depends(get_settings),
):
    if fetch_all:
        result = await fetcher.fetch_all_metadata(page_size=s.METADATA_PAGE_SIZE)
    else:
        result = await fetcher.fetch_metadata_page(
            cursor=cursor if page > 1 else None,
            page_size=s.METADATA_PAGE_SIZE,
            page_number=page,
        )
    return page_response(result)


@router.post("/actions")
async def handle_action(
    action: Annotated[MetadataAction, Body(discriminator="action_type")],
    mutations: ProductMutationService = Depends(get_mutation_service),
    generation_factory: GenerationFactory = Depends(get_generation_factory),
    update_runner: PacedBatchRunner = Depends(get_update_runner),
    generate_runner: PacedBatchRunner = Depends(get_generate_runner),
):
    logger.info(f"Metadata action: {action.action_type}")

    if isinstance(action, GenerateMetadataAction):
        generator = generation_factory()
        outcome = await generator.generate(action.to_unit())
        if not outcome.ok:
            return failure_response(outcome)
        body = {
            "generated": True,
            "productId": action.product_id,
            "generatedMetaTitle": outcome.value.meta_title,
            "generatedMetaDescription": outcome.value.meta_description,
        }
        if not outcome.value.parsed:
            body["rawResult"] = outcome.value.raw
        return body

    if isinstance(action, UpdateMetadataAction):
        outcome = await mutations.update_unit(action.to_unit())
        if not outcome.ok:
            return failure_response(outcome)
        return {"updated": True, **outcome.value}

    if isinstance(action, BulkUpdateMetadataAction):
        units = [update.to_unit() for update in action.updates]
        job = await update_runner.run(units, mutations.update_unit, mode=BatchMode.UPDATE)
        return bulk_response(job, "bulkUpdated")

    if isinstance(action, BulkGenerateMetadataAction):
        generator = generation_factory()
        units = [product.to_unit() for product in action.products]
        operation = generate_then_update(generator.generate, mutations.update_unit)
        job = await generate_runner.run(units, operation, mode=BatchMode.GENERATE_THEN_UPDATE)
        return bulk_response(job, "bulkGeneratedAndUpdated")
