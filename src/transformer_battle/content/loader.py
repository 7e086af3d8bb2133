"""Roster loading with fallback records.

Rosters are JSON arrays of combatant records, either served at
``{base_url}/data/autobots.json`` / ``{base_url}/data/decepticons.json``
or read from local files.  Loading never fails: a transport error, a
malformed URL, a non-2xx status, a body that is not an array, a record
that does not validate, or a record filed under the wrong faction all
substitute the single fallback record for that faction.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from transformer_battle.config import DEFAULT_BASE_URL
from transformer_battle.content.catalog import DATA_DIR
from transformer_battle.core.entities import Combatant, Faction
from transformer_battle.errors import RosterLoadError
from transformer_battle.store.roster import RosterStore

logger = logging.getLogger(__name__)

_FALLBACK_RECORDS: dict[Faction, dict[str, Any]] = {
    Faction.AUTOBOT: {
        "id": "autobot_001",
        "name": "Optimus Prime",
        "faction": "Autobot",
        "icon": "",
        "health": 1000,
        "wins": 0,
        "losses": 0,
        "abilities": [],
    },
    Faction.DECEPTICON: {
        "id": "decepticon_001",
        "name": "Megatron",
        "faction": "Decepticon",
        "icon": "",
        "health": 1000,
        "wins": 0,
        "losses": 0,
        "abilities": [],
    },
}


def fallback_roster(faction: Faction) -> list[Combatant]:
    """Return a fresh one-entry roster used when loading fails."""
    return [Combatant.model_validate(_FALLBACK_RECORDS[faction])]


def roster_filename(faction: Faction) -> str:
    return f"{faction.slug}s.json"


def parse_roster(payload: Any, faction: Faction) -> list[Combatant]:
    """Validate a decoded JSON document as a roster for *faction*.

    Raises :class:`RosterLoadError` if *payload* is not a list, any
    record fails validation, or a record belongs to the other faction.  An empty list is accepted (with a warning).
    """
    if not isinstance(payload, list):
        raise RosterLoadError(f"{roster_filename(faction)} must be an array")
    if not payload:
        logger.warning("%s roster is empty", faction.value)
    try:
        roster = [Combatant.model_validate(record) for record in payload]
    except ValidationError as exc:
        raise RosterLoadError(f"Invalid record in {roster_filename(faction)}: {exc}") from exc
    for combatant in roster:
        if combatant.faction is not faction:
            raise RosterLoadError(
                f"{combatant.name} is a {combatant.faction.value} in {roster_filename(faction)}"
            )
    return roster


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def fetch_roster(
    faction: Faction,
    base_url: str = DEFAULT_BASE_URL,
    client: httpx.Client | None = None,
    timeout: float = 10.0,
) -> list[Combatant]:
    """GET the roster for *faction* from *base_url*, or the fallback."""
    url = f"{base_url.rstrip('/')}/data/{roster_filename(faction)}"
    logger.info("Fetching %s", url)
    try:
        if client is None:
            with httpx.Client(timeout=timeout) as own_client:
                return _fetch(own_client, url, faction)
        return _fetch(client, url, faction)
    except (httpx.HTTPError, httpx.InvalidURL, RosterLoadError, ValueError) as exc:
        logger.warning("Using fallback %ss: %s", faction.value, exc)
        return fallback_roster(faction)


def _fetch(client: httpx.Client, url: str, faction: Faction) -> list[Combatant]:
    response = client.get(url)
    logger.debug("Fetch response: %s %s", response.status_code, response.reason_phrase)
    if not response.is_success:
        raise RosterLoadError(
            f"HTTP {response.status_code}: Failed to fetch {roster_filename(faction)}"
        )
    return parse_roster(response.json(), faction)


def fetch_rosters(
    base_url: str = DEFAULT_BASE_URL,
    client: httpx.Client | None = None,
    timeout: float = 10.0,
) -> RosterStore:
    """Fetch both factions into a new :class:`RosterStore`.

    Each faction falls back independently.
    """
    return RosterStore(
        autobots=fetch_roster(Faction.AUTOBOT, base_url, client, timeout),
        decepticons=fetch_roster(Faction.DECEPTICON, base_url, client, timeout),
    )


# ---------------------------------------------------------------------------
# Local files
# ---------------------------------------------------------------------------

def load_roster_file(path: Path, faction: Faction) -> list[Combatant]:
    """Read a roster from a local JSON file, or the fallback."""
    try:
        payload = json.loads(path.read_text())
        return parse_roster(payload, faction)
    except (OSError, ValueError, RosterLoadError) as exc:
        logger.warning("Using fallback %ss: %s", faction.value, exc)
        return fallback_roster(faction)


def load_bundled_rosters(data_dir: Path | None = None) -> RosterStore:
    """Load both rosters from *data_dir* (defaults to the packaged data)."""
    directory = data_dir or DATA_DIR
    return RosterStore(
        autobots=load_roster_file(directory / roster_filename(Faction.AUTOBOT), Faction.AUTOBOT),
        decepticons=load_roster_file(
            directory / roster_filename(Faction.DECEPTICON), Faction.DECEPTICON,
        ),
    )
