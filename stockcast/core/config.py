"""
Centralized configuration for the forecasting engine
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Engine configuration"""

    # Data source (PostgreSQL). Optional: the engine also runs over in-memory snapshots
    DATABASE_URL: Optional[str] = None
    DB_CONNECT_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0

    # Forecast windows
    LOOKBACK_DAYS: int = 90
    EXTENDED_LOOKBACK_DAYS: int = 180

    # Replenishment defaults
    DEFAULT_LEAD_TIME_DAYS: int = 14
    DEFAULT_MIN_QUANTITY: int = 5

    # Placeholder business constants (no pricing service yet)
    UNIT_PRICE: float = 30.0
    ORDER_COST: float = 100.0
    HOLDING_COST_RATE: float = 0.2

    # Snapshot loading fan-out
    MAX_WORKERS: int = 4

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
