"""
Service settings, read from the environment and an optional .env file.

Rule thresholds are clinical content and live with the rule definitions,
not here.
"""

import os
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Periodic evaluation job (the caller of the rule engine)
    ALERT_EVALUATION_ENABLED: bool = os.getenv("ALERT_EVALUATION_ENABLED", "false").lower() == "true"
    ALERT_EVALUATION_INTERVAL_MINUTES: int = int(os.getenv("ALERT_EVALUATION_INTERVAL_MINUTES", "15"))
    ACTIVE_PATIENT_WINDOW_DAYS: int = int(os.getenv("ACTIVE_PATIENT_WINDOW_DAYS", "7"))

    # Dashboard origins allowed to call the alert API
    CORS_ORIGINS: List[str] = ["http://localhost:5000", "http://127.0.0.1:5000"]

    ENVIRONMENT: str = os.getenv("NODE_ENV", "development")

    def validate_database_url(self):
        if not self.DATABASE_URL:
            raise ValueError(
                "DATABASE_URL is required: point it at the vitals/alerts database "
                "(postgresql://... in deployment, sqlite:// for local runs)."
            )

    class Config:
        env_file = ".env"


settings = Settings()
