"""
Configuration settings using Pydantic v2.
"""
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    SHOPIFY_SHOP: Optional[str] = None
    SHOPIFY_STOREFRONT_ACCESS_TOKEN: Optional[str] = None
    SHOPIFY_ADMIN_API_TOKEN: Optional[str] = None
    STOREFRONT_API_VERSION: str = Field(default="2023-10")
    ADMIN_API_VERSION: str = Field(default="2023-07")

    # Catalog export
    PRODUCTS_PER_PAGE: int = Field(default=20, validation_alias="PRODUCTS_PER_PAGE")
    VARIANTS_PER_PRODUCT: int = Field(default=10, validation_alias="VARIANTS_PER_PRODUCT")
    PAGE_DELAY_SECONDS: float = Field(default=1.0, validation_alias="PAGE_DELAY_SECONDS")
    SHEETS_SERVICE_URL: str = Field(default="https://google-sheets.onrender.com")
    SHEETS_SPREADSHEET_ID: Optional[str] = None
    SHEETS_SHEET_NAME: str = Field(default="shopify-listed")

    # Metafield import
    METAFIELDS_CSV_PATH: str = Field(default="shopify_multi_metafield_template.csv")
    METAFIELD_NAMESPACE: str = Field(default="custom")
    MONGO_URI: Optional[str] = None
    MONGO_DB_NAME: str = Field(default="fpl-data")

    # HTTP boundary; a single attempt keeps both pipelines single-pass
    HTTP_TIMEOUT: float = Field(default=30.0, validation_alias="HTTP_TIMEOUT")
    HTTP_MAX_ATTEMPTS: int = Field(default=1, validation_alias="HTTP_MAX_ATTEMPTS")
    HTTP_BACKOFF: float = Field(default=1.0, validation_alias="HTTP_BACKOFF")

    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storefront_endpoint(self) -> str:
        return f"https://{self.SHOPIFY_SHOP}/api/{self.STOREFRONT_API_VERSION}/graphql.json"

    @property
    def admin_endpoint(self) -> str:
        return f"https://{self.SHOPIFY_SHOP}/admin/api/{self.ADMIN_API_VERSION}/graphql.json"

    def missing(self, *names: str) -> List[str]:
        """Return the subset of ``names`` that are unset or blank."""
        return [name for name in names if not getattr(self, name, None)]

    def require(self, *names: str) -> None:
        """Raise ConfigError listing every missing setting among ``names``."""
        missing = self.missing(*names)
        if missing:
            raise ConfigError(missing)


EXPORT_REQUIRED = ("SHOPIFY_SHOP", "SHOPIFY_STOREFRONT_ACCESS_TOKEN", "SHEETS_SPREADSHEET_ID")
IMPORT_REQUIRED = ("SHOPIFY_SHOP", "SHOPIFY_ADMIN_API_TOKEN")


settings = Settings()
