"""Tests for StationDirectory and the bundled station tables."""

import sys
import unittest
from pathlib import Path

# Add src to path so we can import metrohero
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from metrohero.client import MetroHeroClient
from metrohero.errors import AmbiguousStationError, StationNotFoundError
from metrohero.models import Station
from metrohero.stations import StationDirectory, load_aliases, load_stations

from support import BASE_URL, default_routes, make_session


class TestStationTables(unittest.TestCase):
    """Test the station and alias tables shipped with the package."""

    def test_load_stations(self):
        """Test that every RTU code appears once, in order."""
        stations = load_stations()
        codes = [station.code for station in stations]

        self.assertEqual(len(stations), 102)
        self.assertEqual(codes, sorted(codes))
        self.assertEqual(len(set(codes)), len(codes))
        self.assertIn(Station("B35", "NoMa-Gallaudet U"), stations)
        self.assertIn(Station("E08", "Prince George's Plaza"), stations)

    def test_aliases_point_at_known_stations(self):
        """Test that every alias refers to a station in the table."""
        codes = {station.code for station in load_stations()}
        aliases = load_aliases()

        self.assertEqual(aliases["GMU"], ["K03"])
        self.assertEqual(aliases["Chinatown"], ["B01", "F01"])
        for alias, alias_codes in aliases.items():
            self.assertTrue(set(alias_codes) <= codes, alias)


class TestStationDirectory(unittest.TestCase):
    """Test station resolution by code, name and alias."""

    def setUp(self):
        """Set up test fixtures."""
        self.client = MetroHeroClient(
            api_key="test-key", base_url=BASE_URL, session=make_session(default_routes())
        )
        self.directory = StationDirectory.bundled()

    def test_stations_sorted_by_code(self):
        """Test that the directory lists stations by code."""
        codes = [station.code for station in self.directory.stations]
        self.assertEqual(codes, sorted(codes))
        self.assertEqual(len(self.directory), 102)
        self.assertIn("C05", self.directory)

    def test_resolve_by_code(self):
        """Test resolving an exact RTU code."""
        self.assertEqual(self.directory.resolve("C05"), Station("C05", "Rosslyn"))

    def test_code_match_is_case_sensitive(self):
        """Test that lowercase codes are not treated as codes."""
        with self.assertRaises(StationNotFoundError):
            self.directory.resolve("c05")

    def test_resolve_by_name_ignores_case(self):
        """Test name matching ignores case and surrounding whitespace."""
        for token in ("Rosslyn", "rosslyn", "ROSSLYN", "  Rosslyn "):
            self.assertEqual(self.directory.resolve(token).code, "C05")

    def test_rosslyn_and_c05_agree(self):
        """Test that a name and its code give the same station and departures."""
        by_name = self.directory.resolve("Rosslyn")
        by_code = self.directory.resolve("C05")
        self.assertEqual(by_name, by_code)
        self.assertEqual(
            self.client.get_departures(by_name.code),
            self.client.get_departures(by_code.code),
        )

    def test_resolve_by_alias(self):
        """Test resolving short names such as GMU, DCA and IAD."""
        self.assertEqual(self.directory.resolve("GMU").code, "K03")
        self.assertEqual(self.directory.resolve("dca").code, "C10")
        self.assertEqual(self.directory.resolve("IAD").code, "N10")
        self.assertEqual(self.directory.resolve(" Loudoun ").code, "N11")
        self.assertEqual(self.directory.resolve("Navy Yard").code, "F05")

    def test_ambiguous_name(self):
        """Test that a name shared by two stations is rejected."""
        with self.assertRaises(AmbiguousStationError) as ctx:
            self.directory.resolve("metro center")
        self.assertEqual(ctx.exception.candidates, ["A01", "C01"])

    def test_ambiguous_alias(self):
        """Test that an alias shared by two stations is rejected."""
        with self.assertRaises(AmbiguousStationError) as ctx:
            self.directory.resolve("Chinatown")
        self.assertEqual(ctx.exception.candidates, ["B01", "F01"])

    def test_shared_name_still_resolves_by_code(self):
        """Test that shared names are reachable through their codes."""
        self.assertEqual(self.directory.resolve("C01").name, "Metro Center")
        self.assertEqual(self.directory.resolve("E06").name, "Fort Totten")

    def test_unknown_station(self):
        """Test that an unknown name gives no suggestions."""
        with self.assertRaises(StationNotFoundError) as ctx:
            self.directory.resolve("Atlantis")
        self.assertEqual(ctx.exception.suggestions, [])

    def test_partial_name_gives_suggestions(self):
        """Test that partial names are offered as suggestions."""
        with self.assertRaises(StationNotFoundError) as ctx:
            self.directory.resolve("Falls Church")
        self.assertEqual(
            ctx.exception.suggestions,
            ["East Falls Church (K05)", "West Falls Church-VT/UVA (K06)"],
        )

    def test_resolution_errors_are_value_errors(self):
        """Test that resolution errors can be caught as ValueError."""
        with self.assertRaises(ValueError):
            self.directory.resolve("NONEXISTENT")

    def test_get_station_not_found(self):
        """Test looking up an unknown code."""
        with self.assertRaises(StationNotFoundError):
            self.directory.get_station("Z99")

    def test_find_stations_by_name(self):
        """Test partial name search."""
        results = self.directory.find_stations_by_name("square")
        self.assertEqual([s.code for s in results], ["B02", "C02", "K03"])
        self.assertEqual(self.directory.find_stations_by_name("   "), [])

    def test_custom_directory_skips_unknown_alias_codes(self):
        """Test that aliases for stations outside the directory are ignored."""
        directory = StationDirectory(
            [Station("C05", "Rosslyn")], {"Key Bridge": ["C05"], "GMU": ["K03"]}
        )
        self.assertEqual(directory.resolve("key bridge").code, "C05")
        with self.assertRaises(StationNotFoundError):
            directory.resolve("GMU")


if __name__ == "__main__":
    unittest.main()
