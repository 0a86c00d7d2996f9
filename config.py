"""
Configuration for the inventory pricing and reservation core.

Loads environment variables (from .env when present) and provides
typed config access through the module-level ``config`` singleton.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent
load_dotenv(PROJECT_ROOT / ".env")


class Config:
     """Inventory core configuration."""

     # Database
     DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./inventory.db")
     SQL_ECHO: bool = os.getenv("SQL_ECHO", "false").lower() == "true"

     # Reservation locks
     DEFAULT_LOCK_PERIOD_MINUTES: int = int(os.getenv("DEFAULT_LOCK_PERIOD_MINUTES", "60"))

     # Reclaimer interval (seconds)
     LOCK_RECLAIM_INTERVAL: int = int(os.getenv("LOCK_RECLAIM_INTERVAL", "300"))

     # Logging (set LOG_LEVEL=DEBUG for verbose output)
     LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

     @classmethod
     def validate(cls) -> list[str]:
          """Validate configuration. Returns list of errors."""
          errors = []

          if not cls.DATABASE_URL:
               errors.append("DATABASE_URL is required")

          if cls.DEFAULT_LOCK_PERIOD_MINUTES <= 0:
               errors.append("DEFAULT_LOCK_PERIOD_MINUTES must be positive")

          if cls.LOCK_RECLAIM_INTERVAL <= 0:
               errors.append("LOCK_RECLAIM_INTERVAL must be positive")

          return errors


# Singleton instance
config = Config()
