"""Command-line interface for the MetroHero API."""

import argparse
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv
from rich.console import Console

from . import __version__, formatting
from .client import MetroHeroClient
from .errors import MetroHeroError
from .stations import StationDirectory

logger = logging.getLogger(__name__)


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metrohero",
        description="Departures and trip timing for WMATA Metrorail, via the MetroHero API.",
    )
    parser.add_argument("--api-key", help="MetroHero API key (overrides METROHERO_API_KEY)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    plan = subparsers.add_parser(
        "plan", help="Get information about a route between two stations."
    )
    plan.add_argument("start_station", help="Station name or RTU code")
    plan.add_argument("end_station", help="Station name or RTU code")

    departures = subparsers.add_parser(
        "departures", help="Get information about a Metrorail station."
    )
    departures.add_argument("station", help="Station name or RTU code")

    subparsers.add_parser(
        "stations", help="Print a table of station names and their RTU codes."
    )

    return parser


def run_plan(
    client: MetroHeroClient,
    directory: StationDirectory,
    console: Console,
    start: str,
    end: str,
) -> None:
    origin = directory.resolve(start)
    destination = directory.resolve(end)
    logger.debug(f"Planning trip {origin.code} -> {destination.code}")

    plan = client.get_route_plan(origin.code, destination.code)
    formatting.print_plan(console, plan)


def run_departures(
    client: MetroHeroClient,
    directory: StationDirectory,
    console: Console,
    station_input: str,
) -> None:
    station = directory.resolve(station_input)

    departures = client.get_departures(station.code)
    report = client.get_station_tags(station.code)
    formatting.print_departures(console, station, departures, report)


def run_stations(directory: StationDirectory, console: Console) -> None:
    formatting.print_stations(console, directory.stations)


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    load_dotenv()
    parser = make_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if console is None:
        console = Console()

    directory = StationDirectory.bundled()

    try:
        if args.command == "stations":
            run_stations(directory, console)
            return 0

        with MetroHeroClient.from_env(api_key=args.api_key) as client:
            if args.command == "plan":
                run_plan(client, directory, console, args.start_station, args.end_station)
            elif args.command == "departures":
                run_departures(client, directory, console, args.station)
    except MetroHeroError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nError: Interrupted by user.", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
