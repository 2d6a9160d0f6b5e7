from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings
from typing import List, Any, Optional

from app.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    PROJECT_NAME: str = "Product SEO Toolkit"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Shopify Admin API
    SHOPIFY_STORE_DOMAIN: str = ""
    SHOPIFY_ACCESS_TOKEN: str = ""
    SHOPIFY_API_VERSION: str = "2025-01"

    # Azure OpenAI
    AZURE_OAI_ENDPOINT: str = ""
    AZURE_OAI_KEY: str = ""
    AZURE_OAI_API_VERSION: str = ""
    AZURE_OAI_DEPLOYMENT_NAME: str = ""

    # Paging
    METADATA_PAGE_SIZE: int = 20
    ALT_TEXT_PAGE_SIZE: int = 30

    # Bulk pacing
    BULK_UPDATE_BATCH_SIZE: int = 5
    BULK_GENERATE_BATCH_SIZE: int = 10
    INTER_REQUEST_DELAY: float = 0.1
    REQUEST_TIMEOUT: float = 60.0

    # Security
    CORS_ORIGINS: Any = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_origins(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        case_sensitive = True
        env_file = ".env"


class ShopifyConfig(BaseModel):
    store_domain: str
    access_token: str
    api_version: str
    timeout: float = 60.0

    @property
    def graphql_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}/graphql.json"

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "ShopifyConfig":
        s = s or settings
        _require({
            "SHOPIFY_STORE_DOMAIN": s.SHOPIFY_STORE_DOMAIN,
            "SHOPIFY_ACCESS_TOKEN": s.SHOPIFY_ACCESS_TOKEN,
            "SHOPIFY_API_VERSION": s.SHOPIFY_API_VERSION,
        }, "Shopify Admin API")
        return cls(
            store_domain=s.SHOPIFY_STORE_DOMAIN,
            access_token=s.SHOPIFY_ACCESS_TOKEN,
            api_version=s.SHOPIFY_API_VERSION,
            timeout=s.REQUEST_TIMEOUT,
        )


class GenerationConfig(BaseModel):
    endpoint: str
    api_key: str
    api_version: str
    deployment: str
    timeout: float = 60.0

    @property
    def completions_url(self) -> str:
        return f"{self.endpoint.rstrip('/')}/openai/deployments/{self.deployment}/chat/completions"

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "GenerationConfig":
        s = s or settings
        _require({
            "AZURE_OAI_ENDPOINT": s.AZURE_OAI_ENDPOINT,
            "AZURE_OAI_KEY": s.AZURE_OAI_KEY,
            "AZURE_OAI_API_VERSION": s.AZURE_OAI_API_VERSION,
            "AZURE_OAI_DEPLOYMENT_NAME": s.AZURE_OAI_DEPLOYMENT_NAME,
        }, "Azure OpenAI")
        return cls(
            endpoint=s.AZURE_OAI_ENDPOINT,
            api_key=s.AZURE_OAI_KEY,
            api_version=s.AZURE_OAI_API_VERSION,
            deployment=s.AZURE_OAI_DEPLOYMENT_NAME,
            timeout=s.REQUEST_TIMEOUT,
        )


def _require(values: dict, service: str):
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Missing required {service} configuration: {', '.join(missing)}. "
            "Please check your environment variables."
        )


settings = Settings()
