"""Runtime settings for the battle simulator.

:class:`BattleSettings` loads ``TRANSFORMER_BATTLE_*`` environment
variables; keyword arguments passed to the constructor take precedence,
which is how the command line applies its flags.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "http://localhost:5173"


class BattleSettings(BaseSettings):
    """Tunables shared by the loader, the resolver and the CLI."""

    model_config = SettingsConfigDict(env_prefix="TRANSFORMER_BATTLE_", env_ignore_empty=True)

    base_url: str = DEFAULT_BASE_URL
    """Origin serving ``/data/autobots.json`` and ``/data/decepticons.json``."""

    round_delay: float = Field(default=1.0, ge=0.0)
    """Pause between rounds in seconds.  ``0`` runs the battle flat out."""

    request_timeout: float = Field(default=10.0, gt=0.0)
    seed: int | None = None
    """Seed for the battle RNG, or ``None`` for a fresh one."""

    max_rounds: int | None = Field(default=None, ge=1)
    """Round limit.  ``None`` means battles run until someone falls."""
