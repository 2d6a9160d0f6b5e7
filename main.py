from fastapi import FastAPI
from app.api.endpoints import alt_text, metadata
from app.core.config import settings
from app.core.logging_config import setup_logging
from loguru import logger
from app.core.middleware import log_request_middleware, setup_exception_handlers
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware

# Initialize Logging
setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Bulk editor for Shopify product SEO metadata and image alt text, with Azure OpenAI suggestions."
)

# Add Middleware
app.add_middleware(BaseHTTPMiddleware, dispatch=log_request_middleware)
setup_exception_handlers(app)

# Add CORS last so it runs first (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

@app.get("/")
async def root():
    return {
        "app": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "online",
        "tools": [
            {
                "name": "Product Metadata Editor",
                "description": "Update meta titles and descriptions.",
                "products": f"{settings.API_V1_STR}/metadata/products",
                "actions": f"{settings.API_V1_STR}/metadata/actions",
            },
            {
                "name": "Image Alt Text Editor",
                "description": "Bulk-edit image alt text with AI suggestions.",
                "products": f"{settings.API_V1_STR}/alt-text/products",
                "actions": f"{settings.API_V1_STR}/alt-text/actions",
            },
        ],
    }

# Include Routers
app.include_router(metadata.router, prefix=f"{settings.API_V1_STR}/metadata", tags=["Metadata"])
app.include_router(alt_text.router, prefix=f"{settings.API_V1_STR}/alt-text", tags=["Alt Text"])

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.PROJECT_NAME}...")
    if not settings.SHOPIFY_ACCESS_TOKEN:
        logger.warning("SHOPIFY_ACCESS_TOKEN is not set; product requests will fail.")
    if not settings.AZURE_OAI_ENDPOINT or not settings.AZURE_OAI_KEY:
        logger.warning("Azure OpenAI is not configured; generate actions will fail.")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8080, reload=True)
