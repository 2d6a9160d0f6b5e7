import asyncio
from loguru import logger
from typing import Awaitable, Callable, Iterable, List, Sequence

from app.models.batch import BatchJob, BatchMode, BatchState
from app.models.metadata import GeneratedAltText, GeneratedMetadata, ImageUnit, Unit
from app.models.outcome import Outcome, RemoteFailure

Operation = Callable[[Unit], Awaitable[Outcome]]


def chunked(units: Sequence[Unit], size: int) -> List[Sequence[Unit]]:
    size = max(1, size)
    return [units[i:i + size] for i in range(0, len(units), size)]


def unique_units(units: Iterable[Unit]) -> List[Unit]:
    seen = set()
    result = []
    for unit in units:
        if unit.key in seen:
            logger.warning(f"Duplicate unit {unit.key} dropped from batch")
            continue
        seen.add(unit.key)
        result.append(unit)
    return result


def apply_generated(unit: Unit, generated) -> Unit:
    """Return a copy of ``unit`` whose edited fields hold the generated text."""
    if isinstance(unit, ImageUnit) and isinstance(generated, GeneratedAltText):
        return unit.with_overrides(alt_text=generated.alt_text)
    if isinstance(generated, GeneratedMetadata):
        return unit.with_overrides(
            meta_title=generated.meta_title,
            meta_description=generated.meta_description,
        )
    raise TypeError(f"Cannot apply {type(generated).__name__} to {type(unit).__name__}")


def generate_then_update(generate: Operation, update: Operation) -> Operation:
    # A failed generation is final for the unit; update is never called.
    async def operation(unit: Unit) -> Outcome:
        generated = await generate(unit)
        if not generated.ok:
            return generated
        return await update(apply_generated(unit, generated.value))

    return operation


class PacedBatchRunner:
    """
    Drives units through an operation one at a time.

    Units are split into chunks of ``batch_size`` and consecutive calls are
    separated by ``inter_request_delay`` seconds, so at most one remote call is
    in flight. A failing unit never stops the batch.
    """

    def __init__(self, batch_size: int, inter_request_delay: float, sleep: Callable[[float], Awaitable] = asyncio.sleep):
        self.batch_size = max(1, batch_size)
        self.inter_request_delay = inter_request_delay
        self._sleep = sleep

    async def run(self, units: Iterable[Unit], operation: Operation, mode: BatchMode = BatchMode.UPDATE) -> BatchJob:
        job = BatchJob(items=unique_units(units), mode=mode)
        total = len(job.items)
        chunks = chunked(job.items, self.batch_size)

        job.state = BatchState.RUNNING
        logger.info(f"🚀 Starting {mode.value} batch | {total} units in {len(chunks)} chunks")

        processed = 0
        for chunk_index, chunk in enumerate(chunks):
            logger.info(f"🔄 Chunk {chunk_index + 1}/{len(chunks)} ({len(chunk)} units)")
            for unit in chunk:
                try:
                    outcome = await operation(unit)
                except Exception as e:
                    logger.exception(f"❌ Unexpected error processing {unit.key}: {e}")
                    outcome = RemoteFailure(message=str(e) or type(e).__name__)

                job.results[unit.key] = outcome
                processed += 1
                if not outcome.ok:
                    logger.warning(f"⚠ {unit.label}: {outcome.message}")

                if processed < total and self.inter_request_delay > 0:
                    await self._sleep(self.inter_request_delay)

        job.state = BatchState.COMPLETED
        logger.info(f"🏁 Batch finished | {job.success_count}/{total} succeeded")
        return job
