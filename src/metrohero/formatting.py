"""Helpers for printing MetroHero CLI output to the console."""

from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import Departure, RiderReport, RoutePlan, Station, UnitOutage

FOOTER = "Source: MetroHero API (https://www.dcmetrohero.com)"

# Number of departures shown in a departures table
MAX_DEPARTURE_ROWS = 3


def _eta_cell(departure: Departure) -> Text:
    if departure.eta.is_imminent:
        return Text(str(departure.eta), style="bold blink")
    return Text(str(departure.eta))


def _notes_cell(departure: Departure) -> Text:
    style = "white"
    if departure.is_scheduled:
        style = "grey50"
    if departure.is_holding:
        style = "yellow"
    return Text(departure.notes, style=style)


def build_departures_table(departures: List[Departure]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Line", justify="center")
    table.add_column("Destination")
    table.add_column("ETA")
    table.add_column("Notes")

    for departure in departures[:MAX_DEPARTURE_ROWS]:
        table.add_row(
            Text(str(departure.line), style=f"bold {departure.line.color}"),
            Text(departure.destination),
            _eta_cell(departure),
            _notes_cell(departure),
        )

    return table


def build_reports_table(report: RiderReport) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Report")
    table.add_column("Count", justify="right")

    for tag, count in report.negative_counts():
        table.add_row(Text(tag), str(count))

    return table


def build_stations_table(stations: List[Station]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Code")
    table.add_column("Name")

    for station in stations:
        table.add_row(Text(station.code), Text(station.name))

    return table


def build_outages_table(outages: List[UnitOutage]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Station")
    table.add_column("Unit")
    table.add_column("Location")
    table.add_column("Symptom")

    for outage in outages:
        table.add_row(
            Text(outage.station_name),
            Text(f"{outage.unit_type.title()} {outage.unit_name}"),
            Text(outage.location_description),
            Text(outage.symptom_description),
        )

    return table


def print_stations(console: Console, stations: List[Station]) -> None:
    """Render a table of Metrorail stations and their RTU codes."""
    console.print(Text("WMATA Metrorail Stations", style="bold"))
    console.print(build_stations_table(stations))


def print_departures(
    console: Console,
    station: Station,
    departures: List[Departure],
    report: Optional[RiderReport] = None,
) -> None:
    console.print(f"Departures for {station.name} ({station.code})", markup=False)
    console.print(build_departures_table(departures))

    if report is not None and report.num_negative_tags > 0 and report.negative_counts():
        console.print(build_reports_table(report))

    console.print(FOOTER, markup=False)


def print_plan(console: Console, plan: RoutePlan) -> None:
    # Summary of the ride
    header = f"{plan.from_station_name} --> {plan.to_station_name}"
    console.print(Text(header, style="bold"))
    console.print(
        f"Expected ride:    {int(plan.predicted_ride_time)}m "
        f"(normally {int(plan.expected_ride_time)}m)",
        markup=False,
    )

    next_trains = ", ".join(str(eta) for eta in plan.next_train_etas())
    next_train_at = plan.next_train_at()
    if next_train_at is not None:
        next_trains += f" (at {next_train_at.astimezone().strftime('%H:%M')})"
    console.print(f"Next train:       {next_trains}\n", markup=False)

    console.print(f"Departures from {plan.from_station_name}", markup=False)
    console.print(build_departures_table(plan.departures))

    outages = plan.from_station_outages + plan.to_station_outages
    if outages:
        console.print(Text("\nElevator and escalator outages:", style="bold yellow"))
        console.print(build_outages_table(outages))

    if plan.alerts:
        alerts_table = Table(show_header=True, header_style="bold")
        alerts_table.add_column("Date")
        alerts_table.add_column("Description")
        for alert in plan.alerts:
            alerts_table.add_row(Text(alert.date), Text(alert.description))

        console.print(Text("\nWMATA alerts may impact your trip:", style="bold red"))
        console.print(alerts_table)
        console.print(FOOTER, markup=False)
