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
    AltTextAction,
    BulkGenerateAltTextAction,
    BulkUpdateAltTextAction,
    GenerateAltTextAction,
    UpdateAltTextAction,
)
from app.models.batch import BatchMode
from app.services.batch_runner import PacedBatchRunner, generate_then_update
from app.services.mutation_service import ProductMutationService
from app.services.page_fetcher import ProductPageFetcher

router = APIRouter()


@router.get("/products")
async def list_product_images(
    page: int = Query(1, ge=1),
    cursor: Optional[str] = None,
    fetch_all: bool = Query(False, alias="fetchAll"),
    fetcher: ProductPageFetcher = Depends(get_page_fetcher),
    s: Settings = Depends(get_settings),
):
    if fetch_all:
        result = await fetcher.fetch_all_images(page_size=s.ALT_TEXT_PAGE_SIZE)
    else:
        result = await fetcher.fetch_image_page(
            cursor=cursor if page > 1 else None,
            page_size=s.ALT_TEXT_PAGE_SIZE,
            page_number=page,
        )
    return page_response(result)


@router.post("/actions")
async def handle_action(
    action: Annotated[AltTextAction, Body(discriminator="action_type")],
    mutations: ProductMutationService = Depends(get_mutation_service),
    generation_factory: GenerationFactory = Depends(get_generation_factory),
    update_runner: PacedBatchRunner = Depends(get_update_runner),
    generate_runner: PacedBatchRunner = Depends(get_generate_runner),
):
    logger.info(f"Alt text action: {action.action_type}")

    if isinstance(action, GenerateAltTextAction):
        generator = generation_factory()
        outcome = await generator.generate(action.to_unit())
        if not outcome.ok:
            return failure_response(outcome)
        body = {
            "generated": True,
            "productId": action.product_id,
            "imageId": action.image_id,
            "generatedAltText": outcome.value.alt_text,
        }
        if not outcome.value.parsed:
            body["rawResult"] = outcome.value.raw
        return body

    if isinstance(action, UpdateAltTextAction):
        outcome = await mutations.update_unit(action.to_unit())
        if not outcome.ok:
            return failure_response(outcome)
        return {"updated": True, **outcome.value}

    if isinstance(action, BulkUpdateAltTextAction):
        units = [update.to_unit() for update in action.updates]
        job = await update_runner.run(units, mutations.update_unit, mode=BatchMode.UPDATE)
        return bulk_response(job, "bulkUpdated")

    if isinstance(action, BulkGenerateAltTextAction):
        generator = generation_factory()
        units = [product.to_unit() for product in action.products]
        operation = generate_then_update(generator.generate, mutations.update_unit)
        job = await generate_runner.run(units, operation, mode=BatchMode.GENERATE_THEN_UPDATE)
        return bulk_response(job, "bulkGeneratedAndUpdated")
