"""Station lookup by RTU code, name or alias."""

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import AmbiguousStationError, StationNotFoundError
from .models import Station

logger = logging.getLogger(__name__)

# Reference data shipped with the package; the API has no station listing
DATA_DIR = Path(__file__).parent / "data"
STATIONS_CSV = DATA_DIR / "stations.csv"
ALIASES_CSV = DATA_DIR / "aliases.csv"


def load_stations(path: Path = STATIONS_CSV) -> List[Station]:
    """
    Load the Metrorail station table.

    Args:
        path: CSV file with "code" and "name" columns.

    Returns:
        List of Station objects sorted by RTU code.
    """
    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        stations = [Station(code=row["code"], name=row["name"]) for row in reader]

    stations.sort(key=lambda s: s.code)
    return stations


def load_aliases(path: Path = ALIASES_CSV) -> Dict[str, List[str]]:
    """Load the alias table as {alias: [RTU codes]}."""
    aliases: Dict[str, List[str]] = {}
    with open(path, "r", encoding="utf-8", newline="") as f:
        for row in csv.DictReader(f):
            aliases.setdefault(row["alias"], []).append(row["code"])
    return aliases


class StationDirectory:
    """
    Indexes Metrorail stations for lookups.

    This class provides methods to:
    - Look up a station by its RTU code
    - Find stations by (partial) name
    - Resolve free-text user input, including common aliases such as
      "GMU" or "DCA", to exactly one station
    """

    def __init__(
        self,
        stations: Iterable[Station],
        aliases: Optional[Mapping[str, List[str]]] = None,
    ):
        self._by_code: Dict[str, Station] = {}
        self._by_name: Dict[str, List[Station]] = {}  # lowercased name -> stations
        self._by_alias: Dict[str, List[Station]] = {}  # lowercased alias -> stations

        for station in stations:
            self._by_code[station.code] = station
            self._by_name.setdefault(station.name.lower(), []).append(station)

        for alias, codes in (aliases or {}).items():
            for code in codes:
                if code not in self._by_code:
                    logger.debug(f"Skipping alias {alias!r} for unknown station {code}")
                    continue
                self._by_alias.setdefault(alias.lower(), []).append(self._by_code[code])

        logger.debug(
            f"Indexed {len(self._by_code)} stations and {len(self._by_alias)} aliases"
        )

    @classmethod
    def bundled(cls) -> "StationDirectory":
        """Build a directory from the station and alias tables shipped with the package."""
        return cls(load_stations(), load_aliases())

    @property
    def stations(self) -> List[Station]:
        """All stations ordered by RTU code."""
        return sorted(self._by_code.values(), key=lambda s: s.code)

    def __len__(self) -> int:
        return len(self._by_code)

    def __contains__(self, code: str) -> bool:
        return code in self._by_code

    def get_station(self, code: str) -> Station:
        """Get a station by exact RTU code."""
        if code not in self._by_code:
            raise StationNotFoundError(code)
        return self._by_code[code]

    def find_stations_by_name(self, name: str) -> List[Station]:
        """Find stations whose name contains ``name``, ignoring case."""
        name_lower = name.strip().lower()
        if not name_lower:
            return []
        return [
            station
            for station in self.stations
            if name_lower in station.name.lower()
        ]

    def resolve(self, token: str) -> Station:
        """
        Resolve user input to a single station.

        An exact RTU code match (case-sensitive) wins. Otherwise the input is
        compared against station names and then aliases, ignoring case and
        surrounding whitespace.

        Args:
            token: An RTU code (e.g., "C05"), a station name (e.g., "rosslyn")
                or an alias (e.g., "GMU").

        Returns:
            Station object.

        Raises:
            StationNotFoundError: If nothing matches.
            AmbiguousStationError: If the name or alias is shared by several stations.
        """
        if token in self._by_code:
            return self._by_code[token]

        key = token.strip().lower()
        matches = self._by_name.get(key) or self._by_alias.get(key, [])
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            codes = sorted(station.code for station in matches)
            raise AmbiguousStationError(token, codes)

        suggestions = [
            f"{station.name} ({station.code})"
            for station in self.find_stations_by_name(token)[:5]
        ]
        raise StationNotFoundError(token, suggestions)
