"""
Incredicer - Application Settings

Loads configuration from environment variables using Pydantic Settings.
Values can also come from a local `.env` file next to the working directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Persistence
    save_backend: Literal["file", "supabase"] = "file"
    save_path: Path = Path("saves/incredicer_save.json")
    player_id: str = "local"
    autosave_enabled: bool = True
    autosave_interval: float = Field(default=60.0, gt=0)

    # Supabase (cloud saves only)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None

    # Prestige tuning
    prestige_base_requirement: float = Field(default=1000.0, gt=0)
    prestige_scaling_factor: float = Field(default=10.0, gt=1)
    dark_matter_per_prestige: float = Field(default=1.0, gt=0)
    prestige_level_scaling: float = Field(default=1.1, gt=0)

    # Shop tuning
    dice_value_upgrade_base_cost: float = Field(default=25.0, gt=0)
    dice_value_upgrade_cost_growth: float = Field(default=1.8, ge=1)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @model_validator(mode="after")
    def _check_cloud_credentials(self) -> "Settings":
        if self.save_backend == "supabase" and not (self.supabase_url and self.supabase_anon_key):
            raise ValueError(
                "save_backend 'supabase' requires SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()
