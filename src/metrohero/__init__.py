"""metrohero - Unofficial client and CLI for the MetroHero Metrorail API."""

__version__ = "0.1.0"

from .models import (
    Station,
    Departure,
    Eta,
    EtaState,
    LineCode,
    MetroAlert,
    RiderReport,
    RoutePlan,
    SystemMetrics,
    LineMetrics,
    DirectionMetrics,
    ServiceMetrics,
    ServiceGap,
    Tweet,
    UnitOutage,
)
from .errors import (
    MetroHeroError,
    ConfigurationError,
    ConnectivityError,
    APIError,
    ParseError,
    StationResolutionError,
)
from .config import Settings, resolve_api_key
from .client import MetroHeroClient
from .stations import StationDirectory

__all__ = [
    "MetroHeroClient",
    "StationDirectory",
    "Settings",
    "resolve_api_key",
    "Station",
    "Departure",
    "Eta",
    "EtaState",
    "LineCode",
    "MetroAlert",
    "RiderReport",
    "RoutePlan",
    "SystemMetrics",
    "LineMetrics",
    "DirectionMetrics",
    "ServiceMetrics",
    "ServiceGap",
    "Tweet",
    "UnitOutage",
    "MetroHeroError",
    "ConfigurationError",
    "ConnectivityError",
    "APIError",
    "ParseError",
    "StationResolutionError",
]
