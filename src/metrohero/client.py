"""MetroHero API client and response parsers.

API documentation: https://dcmetrohero.com/apis
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_API_URL, DEFAULT_TIMEOUT, Settings
from .errors import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectivityError,
    InvalidItineraryError,
    InvalidRequestError,
    InvalidStationError,
    InvalidTrainIdError,
    ParseError,
    RateLimitedError,
)
from .models import (
    Departure,
    DirectionMetrics,
    Eta,
    EtaState,
    LineCode,
    LineMetrics,
    MetroAlert,
    RiderReport,
    RoutePlan,
    ServiceGap,
    ServiceMetrics,
    Station,
    SystemMetrics,
    Tweet,
    UnitOutage,
)
from .stations import load_stations

logger = logging.getLogger(__name__)


class MetroHeroClient:
    """
    Synchronous client for the MetroHero Metrorail API.

    Every public method except get_stations() issues exactly one GET
    request. Errors are never retried; the caller gets one MetroHeroError
    subclass describing what went wrong.

    The API key may be omitted at construction time, in which case any
    request raises ConfigurationError before touching the network.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    @classmethod
    def from_settings(
        cls, settings: Settings, session: Optional[requests.Session] = None
    ) -> "MetroHeroClient":
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            session=session,
        )

    @classmethod
    def from_env(cls, api_key: Optional[str] = None) -> "MetroHeroClient":
        """Build a client from METROHERO_* environment variables.

        An explicit api_key wins over METROHERO_API_KEY.
        """
        return cls.from_settings(Settings.from_env(api_key=api_key))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "MetroHeroClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_stations(self) -> List[Station]:
        """
        Get every Metrorail station.

        MetroHero has no station listing endpoint, so this returns the table
        shipped with the package and never touches the network.

        Returns:
            List of Station objects sorted by RTU code.
        """
        stations = load_stations()
        logger.debug(f"Loaded {len(stations)} stations")
        return stations

    def get_departures(self, station_code: str) -> List[Departure]:
        """
        Get real-time and scheduled departures for a station.

        Args:
            station_code: RTU code (e.g., "C05")

        Returns:
            List of Departure objects in ascending ETA order.

        Raises:
            InvalidStationError: If the station code is not known upstream.
        """
        try:
            payload = self._fetch_json(
                f"/metrorail/stations/{station_code}/trains",
                params={"includeScheduledPredictions": "true"},
            )
        except InvalidRequestError as e:
            raise InvalidStationError(station_code) from e

        departures = _parse_departure_list(payload, station_code=station_code)
        logger.debug(f"Parsed {len(departures)} departures for {station_code}")
        return departures

    def get_route_plan(self, origin_code: str, destination_code: str) -> RoutePlan:
        """
        Get trip timing between two stations given current conditions.

        Trips with transfers are not supported by the API; split them into
        segments and request each one separately.

        Args:
            origin_code: RTU code of the boarding station.
            destination_code: RTU code of the alighting station.

        Returns:
            RoutePlan for the trip.

        Raises:
            InvalidItineraryError: If either code is invalid or the stations
                are not connected without a transfer.
        """
        try:
            payload = self._fetch_json(
                f"/metrorail/trips/{origin_code}/{destination_code}"
            )
        except InvalidRequestError as e:
            raise InvalidItineraryError(origin_code, destination_code) from e

        return _parse_route_plan(payload)

    def get_station_tags(self, station_code: str) -> RiderReport:
        """Get current rider reports (tags) for a station."""
        try:
            payload = self._fetch_json(f"/metrorail/stations/{station_code}/tags")
        except InvalidRequestError as e:
            raise InvalidStationError(station_code) from e

        return _parse_rider_report(payload)

    def get_train_positions(self) -> List[Departure]:
        """Get one prediction per train for the whole system, in no particular order."""
        payload = self._fetch_json("/metrorail/trains")
        return _parse_departure_list(payload)

    def get_all_departures(self) -> Dict[str, List[Departure]]:
        """Get departures for every station, keyed by RTU code."""
        payload = self._fetch_json("/metrorail/stations/trains")
        if not isinstance(payload, dict):
            raise ParseError("Expected an object keyed by station code")

        return {
            station_code: _parse_departure_list(predictions, station_code=station_code)
            for station_code, predictions in payload.items()
        }

    def get_train_tags(self, train_id: str) -> RiderReport:
        """Get current rider reports (tags) for a single train."""
        try:
            payload = self._fetch_json(f"/metrorail/trains/{train_id}/tags")
        except InvalidRequestError as e:
            raise InvalidTrainIdError(train_id) from e

        return _parse_rider_report(payload)

    def get_station_reports(self) -> Dict[str, RiderReport]:
        """Get current rider reports for every station, keyed by RTU code."""
        payload = self._fetch_json("/metrorail/stations/tags")
        return _parse_report_map(payload)

    def get_train_reports(self) -> Dict[str, RiderReport]:
        """Get current rider reports for every train, keyed by train ID."""
        payload = self._fetch_json("/metrorail/trains/tags")
        return _parse_report_map(payload)

    def get_system_metrics(self) -> SystemMetrics:
        """
        Get performance metrics for the Metrorail system.

        Returns:
            SystemMetrics with one LineMetrics per revenue line.
        """
        payload = self._fetch_json("/metrorail/metrics")
        metrics = _parse_system_metrics(payload)
        logger.debug(f"Parsed metrics for {len(metrics.lines)} lines")
        return metrics

    def get_tweets(self) -> List[Tweet]:
        """Get recent tweets about Metrorail stations, lines and trains."""
        payload = self._fetch_json("/metrorail/tweets")
        if not isinstance(payload, list):
            raise ParseError("Expected a list of tweets")
        return [_parse_tweet(item) for item in payload]

    def _fetch_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        """
        Send one GET request and decode the JSON body.

        Args:
            path: API path below the base URL, starting with "/".
            params: Optional query parameters.

        Returns:
            Decoded JSON payload.
        """
        if not self.api_key:
            raise ConfigurationError(
                "No MetroHero API key configured; pass --api-key or set METROHERO_API_KEY"
            )

        url = f"{self.base_url}{path}"
        logger.debug(f"Fetching {url}")
        try:
            response = self._session.get(
                url,
                params=params,
                headers={"apiKey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise ConnectivityError(f"Error while communicating with MetroHero API: {e}") from e

        status = response.status_code
        logger.debug(f"{url} returned HTTP {status}")
        if status == 400:
            raise InvalidRequestError()
        if status == 401:
            raise AuthenticationError()
        if status == 503:
            raise RateLimitedError()
        if not 200 <= status < 300:
            raise APIError(status)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Response from {url} was not valid JSON: {e}")
            raise ParseError("Error while parsing data from MetroHero API") from e


def parse_eta(value: Any) -> Eta:
    """
    Parse the "Min" field of a train prediction.

    Args:
        value: Raw value, e.g. "4", "BRD", "ARR", "---".

    Returns:
        Eta with a minute count or a sentinel state.
    """
    raw = "" if value is None else str(value).strip()

    if raw == EtaState.BOARDING.value:
        return Eta(EtaState.BOARDING, raw=raw)
    if raw == EtaState.ARRIVING.value:
        return Eta(EtaState.ARRIVING, raw=raw)
    if raw.isdigit():
        return Eta(EtaState.MINUTES, minutes=int(raw), raw=raw)
    if raw.startswith("-") and raw[1:].isdigit():
        raise ParseError(f"Negative ETA '{raw}'")

    return Eta(EtaState.UNKNOWN, raw=raw or "---")


# Python < 3.11 only accepts fractional seconds with exactly 3 or 6 digits
_FRACTION_RE = re.compile(r"\.(\d+)")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Ignoring unparseable timestamp {value!r}")
        return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _parse_departure(item: Any, station_code: Optional[str] = None) -> Departure:
    """Parse one train prediction.

    ``station_code`` is used when the prediction has no LocationCode of its
    own, e.g. for predictions fetched for a known station.
    """
    try:
        destination = item.get("DestinationName") or item["Destination"]
        direction = item.get("directionNumber")
        return Departure(
            line=LineCode.parse(item["Line"]),
            destination=str(destination),
            eta=parse_eta(item["Min"]),
            station_code=_optional_str(item.get("LocationCode")) or station_code,
            destination_code=_optional_str(item.get("DestinationCode")),
            train_id=_optional_str(item.get("trainId")),
            cars=_optional_str(item.get("Car")),
            group=_optional_str(item.get("Group")),
            direction_number=int(direction) if direction is not None else None,
            is_scheduled=bool(item.get("isScheduled", False)),
            is_holding=bool(item.get("isCurrentlyHoldingOrSlow", False)),
        )
    except ParseError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Malformed train prediction: {e}") from e


def _parse_departure_list(payload: Any, station_code: Optional[str] = None) -> List[Departure]:
    if not isinstance(payload, list):
        raise ParseError("Expected a list of train predictions")
    return [_parse_departure(item, station_code) for item in payload]


def _parse_alert(item: Any) -> MetroAlert:
    try:
        return MetroAlert(
            description=str(item["description"]),
            date=str(item.get("date", "")),
            station_codes=[str(code) for code in item.get("stationCodes") or []],
            line_codes=[LineCode.parse(code) for code in item.get("lineCodes") or []],
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ParseError(f"Malformed alert: {e}") from e


def _parse_tweet(item: Any) -> Tweet:
    try:
        user_id = item.get("userId")
        return Tweet(
            twitter_id=int(item["twitterId"]),
            text=str(item["text"]),
            url=str(item.get("url", "")),
            date=str(item.get("date", "")),
            twitter_id_string=str(item.get("twitterIdString") or item["twitterId"]),
            user_id=int(user_id) if user_id is not None else None,
            station_codes=[str(code) for code in item.get("stationCodes") or []],
            line_codes=[LineCode.parse(code) for code in item.get("lineCodes") or []],
            keywords=[str(keyword) for keyword in item.get("keywords") or []],
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Malformed tweet: {e}") from e


def _parse_outage(item: Any) -> UnitOutage:
    try:
        return UnitOutage(
            station_code=str(item["stationCode"]),
            station_name=str(item["stationName"]),
            unit_name=str(item["unitName"]),
            unit_type=str(item["unitType"]),
            location_description=str(item.get("locationDescription") or ""),
            symptom_description=str(item.get("symptomDescription") or ""),
            out_of_service_date=str(item.get("outOfServiceDate") or ""),
            updated_date=str(item.get("updatedDate") or ""),
            estimated_return_to_service_date=str(item.get("estimatedReturnToServiceDate") or ""),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ParseError(f"Malformed elevator/escalator outage: {e}") from e


def _parse_outages(payload: Any, *keys: str) -> List[UnitOutage]:
    """Merge the outage lists stored under ``keys``; missing lists are empty."""
    outages: List[UnitOutage] = []
    for key in keys:
        outages.extend(_parse_outage(item) for item in payload.get(key) or [])
    return outages


def _parse_route_plan(payload: Any) -> RoutePlan:
    if not isinstance(payload, dict):
        raise ParseError("Expected a trip info object")

    try:
        from_station_code = str(payload["fromStationCode"])
        time_until_next = payload.get("timeUntilNextTrain")
        return RoutePlan(
            from_station_code=from_station_code,
            from_station_name=str(payload["fromStationName"]),
            to_station_code=str(payload["toStationCode"]),
            to_station_name=str(payload["toStationName"]),
            predicted_ride_time=float(payload["predictedRideTime"]),
            expected_ride_time=float(payload["expectedRideTime"]),
            departures=_parse_departure_list(
                payload.get("fromStationTrainStatuses") or [], station_code=from_station_code
            ),
            line_codes=[LineCode.parse(code) for code in payload.get("lineCodes") or []],
            trip_station_codes=[str(code) for code in payload.get("tripStationCodes") or []],
            time_until_next_train=float(time_until_next) if time_until_next is not None else None,
            alerts=[_parse_alert(alert) for alert in payload.get("metroAlerts") or []],
            fetched_at=_parse_timestamp(payload.get("date")),
            tweets=[_parse_tweet(tweet) for tweet in payload.get("tweets") or []],
            from_station_outages=_parse_outages(
                payload, "fromStationElevatorOutages", "fromStationEscalatorOutages"
            ),
            to_station_outages=_parse_outages(
                payload, "toStationElevatorOutages", "toStationEscalatorOutages"
            ),
        )
    except ParseError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Malformed trip info: {e}") from e


def _parse_rider_report(payload: Any) -> RiderReport:
    try:
        counts = payload["numTagsByType"]
        return RiderReport(
            tags_by_type={str(tag): int(count) for tag, count in counts.items()},
            num_positive_tags=int(payload.get("numPositiveTags", 0)),
            num_negative_tags=int(payload.get("numNegativeTags", 0)),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Malformed rider report: {e}") from e


def _parse_report_map(payload: Any) -> Dict[str, RiderReport]:
    if not isinstance(payload, dict):
        raise ParseError("Expected an object of rider reports")
    return {str(key): _parse_rider_report(report) for key, report in payload.items()}


def _parse_service_metrics(item: Any) -> ServiceMetrics:
    return ServiceMetrics(
        date=str(item["date"]),
        num_trains=int(item["numTrains"]),
        num_cars=int(item["numCars"]),
        num_eight_car_trains=int(item["numEightCarTrains"]),
        num_delayed_trains=int(item["numDelayedTrains"]),
        expected_num_trains=int(item["expectedNumTrains"]),
        average_train_delay=_optional_int(item.get("averageTrainDelay")),
        median_train_delay=_optional_int(item.get("medianTrainDelay")),
        minimum_train_delay=_optional_int(item.get("minimumTrainDelay")),
        maximum_train_delay=_optional_int(item.get("maximumTrainDelay")),
        average_minimum_headways=_optional_float(item.get("averageMinimumHeadways")),
        average_train_frequency=_optional_float(item.get("averageTrainFrequency")),
        expected_train_frequency=_optional_float(item.get("expectedTrainFrequency")),
        average_platform_wait_time=_optional_float(item.get("averagePlatformWaitTime")),
        expected_platform_wait_time=_optional_float(item.get("expectedPlatformWaitTime")),
        train_frequency_status=_optional_str(item.get("trainFrequencyStatus")),
        platform_wait_time_trend_status=_optional_str(item.get("platformWaitTimeTrendStatus")),
        average_headway_adherence=_optional_float(item.get("averageHeadwayAdherence")),
        average_schedule_adherence=_optional_float(item.get("averageScheduleAdherence")),
        standard_deviation_train_frequency=_optional_float(
            item.get("standardDeviationTrainFrequency")
        ),
        expected_standard_deviation_train_frequency=_optional_float(
            item.get("expectedStandardDeviationTrainFrequency")
        ),
    )


def _parse_service_gap(item: Any) -> ServiceGap:
    return ServiceGap(
        line_code=LineCode.parse(item["lineCode"]),
        direction_number=int(item["directionNumber"]),
        direction=str(item["direction"]),
        from_station_code=str(item["fromStationCode"]),
        from_station_name=str(item["fromStationName"]),
        to_station_code=str(item["toStationCode"]),
        to_station_name=str(item["toStationName"]),
        from_train_id=str(item["fromTrainId"]),
        to_train_id=str(item["toTrainId"]),
        time_between_trains=float(item["timeBetweenTrains"]),
        scheduled_time_between_trains=float(item["scheduledTimeBetweenTrains"]),
        observed_date=str(item.get("observedDate") or ""),
    )


def _parse_line_metrics(item: Any) -> LineMetrics:
    line_code = LineCode.parse(item["lineCode"])

    # A direction is null when no trains are running that way
    directions: Dict[int, DirectionMetrics] = {}
    for direction in (item.get("directionMetricsByDirection") or {}).values():
        if direction is None:
            continue
        number = int(direction["directionNumber"])
        directions[number] = DirectionMetrics(
            line_code=line_code,
            direction_number=number,
            direction=str(direction["direction"]),
            towards_station_name=str(direction["towardsStationName"]),
            metrics=_parse_service_metrics(direction),
        )

    return LineMetrics(
        line_code=line_code,
        metrics=_parse_service_metrics(item),
        service_gaps=[_parse_service_gap(gap) for gap in item.get("serviceGaps") or []],
        directions=directions,
    )


def _parse_system_metrics(payload: Any) -> SystemMetrics:
    if not isinstance(payload, dict):
        raise ParseError("Expected a system metrics object")

    try:
        lines: Dict[LineCode, LineMetrics] = {}
        for item in payload["lineMetricsByLine"].values():
            if item is None:
                continue
            metrics = _parse_line_metrics(item)
            lines[metrics.line_code] = metrics
        return SystemMetrics(date=str(payload.get("date", "")), lines=lines)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Malformed system metrics: {e}") from e
