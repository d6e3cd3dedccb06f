from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "PO Routing Engine"
    environment: str = "development"
    log_level: str = "INFO"

    database_url: str = Field(default="", alias="DATABASE_URL")
    routing_api_key: str = Field(default="", alias="ROUTING_API_KEY")
    admin_api_key: str = Field(default="", alias="ADMIN_API_KEY")
    allowed_origins_raw: str = Field(default="", alias="ALLOWED_ORIGINS")

    # Optional JSON file overriding the built-in restricted prefix/keyword sets.
    routing_rules_path: Path | None = Field(default=None, alias="ROUTING_RULES_PATH")

    decision_page_size: int = Field(default=50, alias="DECISION_PAGE_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def resolved_database_url(self) -> str:
        return self.database_url.strip()

    @property
    def resolved_admin_api_key(self) -> str:
        if self.admin_api_key.strip():
            return self.admin_api_key.strip()
        return self.routing_api_key.strip()

    @property
    def allowed_origins(self) -> list[str]:
        return [
            origin.strip()
            for origin in self.allowed_origins_raw.split(",")
            if origin.strip()
        ]

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    def missing_required_env_vars(self) -> list[str]:
        missing: list[str] = []

        checks = {
            "DATABASE_URL": self.database_url,
            "ROUTING_API_KEY": self.routing_api_key,
            "ALLOWED_ORIGINS": self.allowed_origins_raw,
        }

        for key, value in checks.items():
            if not str(value).strip():
                missing.append(key)

        return missing

    def validate_required(self) -> None:
        missing = self.missing_required_env_vars()
        if missing:
            joined = ", ".join(sorted(missing))
            raise ValueError(f"Missing required environment variables: {joined}")

        if self.is_production and (
            not self.admin_api_key.strip() or self.admin_api_key.strip() == self.routing_api_key.strip()
        ):
            raise ValueError("ADMIN_API_KEY must be set and differ from ROUTING_API_KEY in production")

        if self.routing_rules_path is not None and not self.routing_rules_path.is_file():
            raise ValueError(f"ROUTING_RULES_PATH does not point to a file: {self.routing_rules_path}")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
