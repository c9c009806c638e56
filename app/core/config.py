from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Core
    project_name: str = "BudgetOps API"
    api_v1_prefix: str = "/api/v1"

    # ============================================
    # LOGGING
    # ============================================
    log_level: str = "INFO"
    log_json: bool = False

    # ============================================
    # PLANNING
    # ============================================
    forecast_max_horizon: int = 60
    forecast_period_unit: Literal["monthly", "quarterly", "yearly"] = "monthly"
    variance_threshold_pct: float = 5.0

    # ============================================
    # HTTP
    # ============================================
    cors_origins: str = "*"  # Comma-separated

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    # Helper methods
    def get_cors_origins(self) -> list[str]:
        """Return allowed CORS origins as a list."""
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
