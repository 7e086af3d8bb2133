"""Static content: the ability catalog and roster loading."""

from transformer_battle.content.catalog import AbilityCatalog
from transformer_battle.content.loader import (
    fallback_roster,
    fetch_roster,
    fetch_rosters,
    load_bundled_rosters,
    load_roster_file,
    parse_roster,
)

__all__ = [
    "AbilityCatalog",
    "fallback_roster",
    "fetch_roster",
    "fetch_rosters",
    "load_bundled_rosters",
    "load_roster_file",
    "parse_roster",
]
