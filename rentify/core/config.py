from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(alias="DATABASE_URL")

    # JWT Configuration
    secret_key: str = Field(alias="SECRET_KEY")
    algorithm: str = Field(alias="ALGORITHM")
    access_token_expire_minutes: int = Field(alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # First Admin User
    first_admin_email: str = Field(alias="FIRST_ADMIN_EMAIL")
    first_admin_password: str = Field(alias="FIRST_ADMIN_PASSWORD")

    # Frontend URL (enables CORS for its origin)
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Contracts
    default_currency: str = Field(default="PHP", alias="DEFAULT_CURRENCY")
    max_contract_documents: int = Field(default=5, alias="MAX_CONTRACT_DOCUMENTS")
    max_document_size_mb: int = Field(default=10, alias="MAX_DOCUMENT_SIZE_MB")
    contract_update_max_retries: int = Field(
        default=3, alias="CONTRACT_UPDATE_MAX_RETRIES"
    )
    pdf_app_name: str = Field(default="Rentify", alias="PDF_APP_NAME")

    # Blob storage (any S3-compatible bucket: R2, S3, MinIO)
    storage_endpoint_url: str | None = Field(default=None, alias="STORAGE_ENDPOINT_URL")
    storage_access_key_id: str | None = Field(default=None, alias="STORAGE_ACCESS_KEY_ID")
    storage_secret_access_key: str | None = Field(
        default=None, alias="STORAGE_SECRET_ACCESS_KEY"
    )
    storage_bucket_name: str | None = Field(default=None, alias="STORAGE_BUCKET_NAME")
    storage_region: str = Field(default="auto", alias="STORAGE_REGION")
    storage_public_base_url: str | None = Field(
        default=None, alias="STORAGE_PUBLIC_BASE_URL"
    )
    storage_contracts_folder: str = Field(
        default="contracts", alias="STORAGE_CONTRACTS_FOLDER"
    )

    @field_validator(
        "frontend_url",
        "storage_endpoint_url",
        "storage_access_key_id",
        "storage_secret_access_key",
        "storage_bucket_name",
        "storage_public_base_url",
        mode="before",
    )
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for optional string fields."""
        if v == "":
            return None
        return v

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        if len(v) != 3 or not v.isalpha():
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter code")
        return v.upper()

    @property
    def max_document_size_bytes(self) -> int:
        return self.max_document_size_mb * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
