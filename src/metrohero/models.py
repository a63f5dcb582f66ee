"""Data models for the MetroHero API."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional


class LineCode(Enum):
    """Metrorail line codes as sent by the API."""
    RED = "RD"
    ORANGE = "OR"
    SILVER = "SV"
    BLUE = "BL"
    YELLOW = "YL"
    GREEN = "GR"
    NON_REVENUE = "N/A"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LineCode":
        """Map a wire value to a line; anything unrecognised is non-revenue."""
        try:
            return cls(value)
        except ValueError:
            return cls.NON_REVENUE

    @property
    def color(self) -> str:
        """Terminal colour used when rendering this line."""
        return _LINE_COLORS[self]

    def __str__(self) -> str:
        return self.value


_LINE_COLORS = {
    LineCode.RED: "red",
    LineCode.ORANGE: "dark_orange",
    LineCode.SILVER: "grey70",
    LineCode.BLUE: "blue",
    LineCode.YELLOW: "yellow",
    LineCode.GREEN: "green",
    LineCode.NON_REVENUE: "magenta",
}


class EtaState(Enum):
    MINUTES = "minutes"
    BOARDING = "BRD"
    ARRIVING = "ARR"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Station:
    """Represents a Metrorail station."""
    code: str  # RTU code, e.g. "C05"
    name: str


@dataclass(frozen=True)
class Eta:
    """Time until a train reaches a platform.

    Either a non-negative minute countdown or one of the sentinel states.
    ``raw`` keeps the upstream text so unknown values can still be shown.
    """
    state: EtaState
    minutes: Optional[int] = None
    raw: str = ""

    @property
    def is_imminent(self) -> bool:
        return self.state in (EtaState.BOARDING, EtaState.ARRIVING)

    def __str__(self) -> str:
        if self.state is EtaState.MINUTES:
            return f"{self.minutes}m"
        if self.is_imminent:
            return self.state.value
        return self.raw


@dataclass
class Departure:
    """A predicted train departure from a station."""
    line: LineCode
    destination: str
    eta: Eta
    station_code: Optional[str] = None  # Station the prediction belongs to; None only for train positions
    destination_code: Optional[str] = None
    train_id: Optional[str] = None
    cars: Optional[str] = None
    group: Optional[str] = None  # Track group, "1" or "2"
    direction_number: Optional[int] = None
    is_scheduled: bool = False
    is_holding: bool = False

    @property
    def notes(self) -> str:
        notes = []
        if self.is_scheduled:
            notes.append("Scheduled (Not Live)")
        if self.is_holding:
            notes.append("Holding")
        return ", ".join(notes)


@dataclass
class MetroAlert:
    """A service alert issued by WMATA."""
    description: str
    date: str
    station_codes: List[str] = field(default_factory=list)
    line_codes: List[LineCode] = field(default_factory=list)


@dataclass
class RoutePlan:
    """Timing for a trip between two stations without a transfer."""
    from_station_code: str
    from_station_name: str
    to_station_code: str
    to_station_name: str
    predicted_ride_time: float  # Minutes, given current conditions
    expected_ride_time: float  # Minutes, normally
    departures: List[Departure]
    line_codes: List[LineCode] = field(default_factory=list)
    trip_station_codes: List[str] = field(default_factory=list)
    time_until_next_train: Optional[float] = None
    alerts: List[MetroAlert] = field(default_factory=list)
    fetched_at: Optional[datetime] = None
    tweets: List["Tweet"] = field(default_factory=list)
    from_station_outages: List["UnitOutage"] = field(default_factory=list)
    to_station_outages: List["UnitOutage"] = field(default_factory=list)

    def next_train_etas(self, count: int = 4) -> List[Eta]:
        return [departure.eta for departure in self.departures[:count]]

    def next_train_at(self) -> Optional[datetime]:
        """Absolute time the next train is due, if it can be worked out."""
        if self.fetched_at is None:
            return None

        minutes = self.time_until_next_train
        if minutes is None:
            for departure in self.departures:
                if departure.eta.state is EtaState.MINUTES:
                    minutes = departure.eta.minutes
                    break
                if departure.eta.is_imminent:
                    minutes = 0
                    break
        if minutes is None:
            return None

        return self.fetched_at + timedelta(minutes=minutes)


# Tags that describe a problem at a station, in display order
NEGATIVE_STATION_TAGS = [
    "UNCOMFORTABLE_TEMPS",
    "CROWDED",
    "LONG_WAITING_TIME",
    "NEEDS_WORK",
    "POSTED_TIMES_INACCURATE",
    "SMOKE_OR_FIRE",
    "UNFRIENDLY_OR_UNHELPFUL_STAFF",
]


@dataclass
class RiderReport:
    """User-submitted tag counts for a station or a train."""
    tags_by_type: Dict[str, int]
    num_positive_tags: int
    num_negative_tags: int

    def negative_counts(self) -> List[tuple]:
        """(tag, count) for each negative station tag with a non-zero count."""
        return [
            (tag, self.tags_by_type[tag])
            for tag in NEGATIVE_STATION_TAGS
            if self.tags_by_type.get(tag, 0) > 0
        ]


@dataclass
class Tweet:
    """A tweet about a Metrorail station, line or train."""
    twitter_id: int
    text: str
    url: str
    date: str
    twitter_id_string: str = ""
    user_id: Optional[int] = None
    station_codes: List[str] = field(default_factory=list)
    line_codes: List[LineCode] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)


@dataclass
class UnitOutage:
    """An elevator or escalator that WMATA reports out of service."""
    station_code: str
    station_name: str
    unit_name: str
    unit_type: str  # "ELEVATOR" or "ESCALATOR"
    location_description: str = ""
    symptom_description: str = ""
    out_of_service_date: str = ""
    updated_date: str = ""
    estimated_return_to_service_date: str = ""


@dataclass
class ServiceGap:
    """An unusually long gap between two consecutive trains."""
    line_code: LineCode
    direction_number: int
    direction: str
    from_station_code: str
    from_station_name: str
    to_station_code: str
    to_station_name: str
    from_train_id: str
    to_train_id: str
    time_between_trains: float  # Minutes
    scheduled_time_between_trains: float  # Minutes
    observed_date: str = ""


@dataclass
class ServiceMetrics:
    """Performance figures shared by line-wide and per-direction metrics.

    Delays are in seconds; frequencies, headways and wait times in minutes.
    """
    date: str
    num_trains: int
    num_cars: int
    num_eight_car_trains: int
    num_delayed_trains: int
    expected_num_trains: int
    average_train_delay: Optional[int] = None
    median_train_delay: Optional[int] = None
    minimum_train_delay: Optional[int] = None
    maximum_train_delay: Optional[int] = None
    average_minimum_headways: Optional[float] = None
    average_train_frequency: Optional[float] = None
    expected_train_frequency: Optional[float] = None
    average_platform_wait_time: Optional[float] = None
    expected_platform_wait_time: Optional[float] = None
    train_frequency_status: Optional[str] = None
    platform_wait_time_trend_status: Optional[str] = None
    average_headway_adherence: Optional[float] = None
    average_schedule_adherence: Optional[float] = None
    standard_deviation_train_frequency: Optional[float] = None
    expected_standard_deviation_train_frequency: Optional[float] = None


@dataclass
class DirectionMetrics:
    """Metrics for one direction of travel on a line."""
    line_code: LineCode
    direction_number: int
    direction: str  # e.g. "Eastbound"
    towards_station_name: str
    metrics: ServiceMetrics


@dataclass
class LineMetrics:
    """Metrics for a whole line, with a breakdown by direction."""
    line_code: LineCode
    metrics: ServiceMetrics
    service_gaps: List[ServiceGap] = field(default_factory=list)
    directions: Dict[int, DirectionMetrics] = field(default_factory=dict)  # Direction number -> metrics


@dataclass
class SystemMetrics:
    """Performance metrics for every Metrorail line."""
    date: str
    lines: Dict[LineCode, LineMetrics]

    def delayed_lines(self) -> List[LineCode]:
        """Lines with at least one delayed train, in line-code order."""
        return [
            line for line in LineCode
            if line in self.lines and self.lines[line].metrics.num_delayed_trains > 0
        ]
