"""Application configuration via environment variables."""

import json
from typing import List

from pydantic_settings import BaseSettings

from absence_hub.common.constants import CountMode
from absence_hub.vacations.schemas import VacationSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "info"
    CORS_ORIGINS: str = '["http://localhost:3000"]'
    RATE_LIMIT_DEFAULT: str = "60/minute"

    # Vacation rules
    VACATION_COUNT_MODE: CountMode = CountMode.business_days
    VACATION_CARRYOVER_ENABLED: bool = True
    VACATION_CARRYOVER_MAX_CYCLES: int = 3
    VACATION_ACCRUAL_YEARS: int = 3

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS JSON string into a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except (json.JSONDecodeError, TypeError):
            return ["http://localhost:3000"]

    def vacation_settings(self) -> VacationSettings:
        """Vacation calculation settings derived from the environment."""
        return VacationSettings(
            count_mode=self.VACATION_COUNT_MODE,
            carryover_enabled=self.VACATION_CARRYOVER_ENABLED,
            carryover_max_cycles=self.VACATION_CARRYOVER_MAX_CYCLES,
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
