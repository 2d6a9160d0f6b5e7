from fastapi.responses import JSONResponse
from typing import Any, Dict

from app.models.batch import BatchJob
from app.models.outcome import ValidationFailure
from app.models.metadata import Page


def failure_response(outcome, prefix: str = "") -> JSONResponse:
    status_code = 400 if isinstance(outcome, ValidationFailure) else 500
    message = f"{prefix}{outcome.message}" if prefix else outcome.message
    return JSONResponse(status_code=status_code, content={"error": message})


def bulk_response(job: BatchJob, flag: str) -> Dict[str, Any]:
    errors = job.errors
    return {
        flag: True,
        "updatedCount": job.success_count,
        "errors": errors or None,
        "displayErrors": job.display_errors(),
        "results": [outcome.value for outcome in job.successes],
    }


def page_response(page: Page) -> Dict[str, Any]:
    body = {
        "units": [unit.model_dump(by_alias=True) for unit in page.units],
        "hasNext": page.has_next,
        "nextCursor": page.cursor,
        "currentPage": page.page_number,
    }
    if page.total_images is not None:
        body["totalImages"] = page.total_images
    return body
