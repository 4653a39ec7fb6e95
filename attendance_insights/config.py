"""
Configuration management for the attendance insights engine.

Loads environment variables and validates the settings needed for
optional Supabase persistence.
"""

import os
from typing import Tuple
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _split_names(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


class Config:
    """Configuration class for the attendance insights engine."""

    # Supabase credentials (only required for saved filter sets)
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    SAVED_FILTERS_TABLE: str = os.getenv("SAVED_FILTERS_TABLE", "saved_filter_sets")

    # Ranking configuration
    RANKING_LIST_SIZE: int = int(os.getenv("RANKING_LIST_SIZE", "10"))
    RANKING_MIN_OCCURRENCES: int = int(os.getenv("RANKING_MIN_OCCURRENCES", "2"))
    RANKING_EXCLUDED_NAMES: Tuple[str, ...] = _split_names(
        os.getenv("RANKING_EXCLUDED_NAMES", "recovery,cycle,hosted")
    )

    # Chart configuration
    CHART_TOP_K: int = int(os.getenv("CHART_TOP_K", "10"))  # Groups kept per chart series

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """
        Validate that Supabase configuration is present.

        Raises:
            ValueError: If required configuration is missing.
        """
        missing = []

        if not cls.SUPABASE_URL:
            missing.append("SUPABASE_URL")
        if not cls.SUPABASE_SERVICE_ROLE_KEY:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                f"Please create a .env file with these values (see .env.example)."
            )
