"""
Application Settings

This module provides a centralized settings class that loads environment
variables from the .env file and makes them available throughout the application.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from coach.errors import ConfigurationError

# Load the .env file from the project root
# The project root is one level up from the coach folder
PROJECT_ROOT = Path(__file__).parent.parent
load_dotenv(PROJECT_ROOT / ".env")


class Settings:
    """
    Centralized settings class that provides access to all environment variables.
    Usage:
        from coach.settings import settings
        ceilings = settings.ceiling_config()
    """

    # Google Gemini API Key (suggestion generator)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    SUGGESTION_MODEL: str = os.getenv("SUGGESTION_MODEL", "gemini-2.5-flash")

    # Database (snapshot persistence)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Debug mode
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Attempt ceilings per step (raw strings, parsed in ceiling_config)
    COACHING_CEILING: str = os.getenv("COACHING_CEILING", "3")
    REFINEMENT_CEILING: str = os.getenv("REFINEMENT_CEILING", "2")
    HELP_CEILING: str = os.getenv("HELP_CEILING", "2")
    TOTAL_CEILING: str = os.getenv("TOTAL_CEILING", "8")

    @classmethod
    def ceiling_config(cls):
        """
        Build the attempt ceilings from the environment.

        Raises:
            ConfigurationError: if a value is not an integer or is out of range.
        """
        from coach.progression.schemas import CeilingConfig

        raw = {
            "coaching": cls.COACHING_CEILING,
            "refinement": cls.REFINEMENT_CEILING,
            "help": cls.HELP_CEILING,
            "total": cls.TOTAL_CEILING,
        }
        parsed = {}
        for name, value in raw.items():
            try:
                parsed[name] = int(str(value).strip())
            except ValueError:
                raise ConfigurationError(
                    f"{name.upper()}_CEILING must be an integer, got '{value}'"
                )

        config = CeilingConfig(**parsed)
        config.validate_ceilings()
        return config

    @classmethod
    def validate(cls) -> None:
        """Validate that all required environment variables are set."""
        errors = []

        if not cls.GEMINI_API_KEY:
            errors.append("GEMINI_API_KEY is not set in .env file")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


# Create a singleton instance for easy import
settings = Settings()
