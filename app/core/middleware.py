from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
import time
import uuid

from app.core.exceptions import ConfigurationError, PageLoadError

async def log_request_middleware(request: Request, call_next):
    request_id = str(uuid.uuid4())
    # Add request id to the loguru context
    with logger.contextualize(request_id=request_id):
        start_time = time.time()

        logger.info(f"Incoming request: {request.method} {request.url.path}")

        try:
            response = await call_next(request)

            process_time = (time.time() - start_time) * 1000
            formatted_process_time = "{0:.2f}".format(process_time)

            logger.info(f"Completed request: {request.method} {request.url.path} - Status: {response.status_code} - Duration: {formatted_process_time}ms")

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            logger.exception(f"Unhandled exception occurred: {str(e)}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "An internal server error occurred.", "request_id": request_id}
            )

def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    if first.get("type") == "union_tag_invalid":
        return "Invalid action type."
    if first.get("type") == "union_tag_not_found":
        return "Missing action type."
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message

def setup_exception_handlers(app):
    @app.exception_handler(ConfigurationError)
    async def configuration_exception_handler(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration error: {str(exc)}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(PageLoadError)
    async def page_load_exception_handler(request: Request, exc: PageLoadError):
        logger.error(f"Loader error: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={"error": f"Failed to load products: {str(exc)}"}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _first_validation_message(exc)
        logger.warning(f"Rejected request body: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global Exception: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": str(exc)}
        )
