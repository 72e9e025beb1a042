"""Weather source backed by the Open-Meteo forecast API."""

from typing import Any

import structlog

from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.sources.base import check_response, decode_json
from burrow.sources.errors import SourceError, SourceErrorClass
from burrow.sources.models import WeatherReport


logger = structlog.get_logger()

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

# Hourly data starts at 00:00, so index 12 is noon when timestamps are absent
MIDDAY_HOUR = "12"
DEFAULT_MIDDAY_INDEX = 12

# Upper bounds of WMO weather interpretation code ranges
_WMO_DESCRIPTIONS: tuple[tuple[int, str], ...] = (
    (0, "Clear sky"),
    (3, "Partly cloudy"),
    (48, "Foggy"),
    (57, "Drizzle"),
    (67, "Rain"),
    (77, "Snow"),
    (82, "Rain showers"),
    (86, "Snow showers"),
    (99, "Thunderstorm"),
)


def weather_description(code: int) -> str:
    """Map a WMO weather code to a short description.

    Args:
        code: WMO weather interpretation code.

    Returns:
        Human-readable description, ``"Unknown"`` for out-of-range codes.
    """
    if code < 0:
        return "Unknown"
    for upper, description in _WMO_DESCRIPTIONS:
        if code <= upper:
            return description
    return "Unknown"


def _first(values: list[Any]) -> float:
    return float(values[0]) if values else 0.0


def _midday_index(times: list[str]) -> int:
    for index, stamp in enumerate(times):
        # ISO hour, e.g. "2024-01-15T12:00"
        if len(stamp) >= 13 and stamp[11:13] == MIDDAY_HOUR:  # noqa: PLR2004
            return index
    return DEFAULT_MIDDAY_INDEX


class WeatherSource:
    """Today's midday forecast for a single location."""

    def __init__(
        self,
        http: HttpFetcher,
        latitude: float,
        longitude: float,
        location: str,
        base_url: str = OPEN_METEO_URL,
    ) -> None:
        """Initialize the weather source.

        Args:
            http: Shared HTTP fetcher.
            latitude: Location latitude.
            longitude: Location longitude.
            location: Display name of the location.
            base_url: Forecast endpoint.
        """
        self._http = http
        self._latitude = latitude
        self._longitude = longitude
        self._location = location
        self._base_url = base_url

    def name(self) -> str:
        return "Weather"

    def fetch(self, ctx: FetchContext) -> WeatherReport:
        """Fetch today's forecast.

        Args:
            ctx: Shared run context.

        Returns:
            WeatherReport for midday.

        Raises:
            SourceError: On HTTP or decoding failure.
        """
        response = self._http.get(
            ctx,
            source=self.name(),
            url=self._base_url,
            params={
                "latitude": f"{self._latitude:.4f}",
                "longitude": f"{self._longitude:.4f}",
                "hourly": "temperature_2m,weather_code",
                "daily": (
                    "temperature_2m_max,temperature_2m_min,"
                    "precipitation_probability_max"
                ),
                "timezone": "auto",
                "forecast_days": 1,
            },
        )
        check_response(response, self.name(), "weather forecast")
        body = decode_json(response, self.name(), "weather forecast")

        try:
            return self._parse(body)
        except (AttributeError, TypeError, ValueError) as e:
            raise SourceError(
                SourceErrorClass.PARSE,
                f"decoding weather forecast: {e}",
                source=self.name(),
            ) from e

    def _parse(self, body: dict[str, Any]) -> WeatherReport:
        hourly = body.get("hourly") or {}
        daily = body.get("daily") or {}

        index = _midday_index(hourly.get("time") or [])
        temperatures = hourly.get("temperature_2m") or []
        codes = hourly.get("weather_code") or []

        temperature = float(temperatures[index]) if index < len(temperatures) else 0.0
        code = int(codes[index]) if index < len(codes) else 0

        report = WeatherReport(
            temperature=temperature,
            high_temp=_first(daily.get("temperature_2m_max") or []),
            low_temp=_first(daily.get("temperature_2m_min") or []),
            precipitation=_first(daily.get("precipitation_probability_max") or []),
            weather_code=code,
            description=weather_description(code),
            location=self._location,
        )
        logger.debug(
            "weather_parsed",
            component="source",
            source=self.name(),
            weather_code=code,
        )
        return report
