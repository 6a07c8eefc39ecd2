"""
Doctor-Locator.

Turns a search intent into a Google Maps search link:
  - auto:   the browser's current position (single-shot geolocation)
  - manual: a free-text location typed by the user, used verbatim

Geolocation itself happens in the browser; `BrowserGeolocation` wraps what
the page reported so the conversation can await it like any other
capability.
"""

from decimal import Decimal
from typing import NamedTuple
from urllib.parse import quote

import config

# Characters JavaScript's encodeURIComponent leaves untouched besides
# letters, digits and "-_.~" (which quote() never escapes).
_URI_COMPONENT_SAFE = "!*'()"

LOCATION_PROMPT = (
    "To find a specialist, you can share your location automatically or "
    "type a location (like a city or zip code) below."
)
NEARBY_FOUND = "Great! Here is a link showing specialists near you."
GEOLOCATION_FAILED = (
    "I couldn't get your location. Please ensure location services are "
    "enabled or try searching manually."
)
GEOLOCATION_UNSUPPORTED = (
    "Sorry, your browser doesn't support location services. Please enter a "
    "location manually."
)


class GeolocationError(Exception):
    """The browser could not provide a position (denied, timeout, ...)."""


class LocatorResult(NamedTuple):
    text: str
    kind: str | None = None
    link: str | None = None


def _format_coordinate(value: float) -> str:
    # Match how the browser prints numbers: 41.0 -> "41", 5e-05 -> "0.00005".
    # JavaScript keeps plain decimals down to 1e-6; repr() stops at 1e-4.
    value = float(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text:
        if abs(value) >= 1e-6:
            return format(Decimal(text), "f")
        mantissa, exponent = text.split("e")
        text = f"{mantissa}e{int(exponent):+d}"
    return text


def build_nearby_search_url(latitude: float, longitude: float) -> str:
    query = config.MAPS_QUERY_TERM.replace(" ", "+")
    return (
        f"{config.MAPS_SEARCH_URL}{query}/"
        f"@{_format_coordinate(latitude)},{_format_coordinate(longitude)},"
        f"{config.MAPS_ZOOM}z"
    )


def build_location_search_url(location: str) -> str:
    encoded = quote(f"{config.MAPS_QUERY_TERM} in {location}", safe=_URI_COMPONENT_SAFE)
    return f"{config.MAPS_SEARCH_URL}?api=1&query={encoded}"


class BrowserGeolocation:
    """Result of `navigator.geolocation.getCurrentPosition` in the page."""

    def __init__(self, latitude: float | None, longitude: float | None, error: str | None = None):
        self.latitude = latitude
        self.longitude = longitude
        self.error = error

    async def get_current_position(self) -> tuple[float, float]:
        if self.error or self.latitude is None or self.longitude is None:
            raise GeolocationError(self.error or "position unavailable")
        return float(self.latitude), float(self.longitude)


class DoctorLocator:
    """Resolves auto/manual search intents into bot replies."""

    async def resolve(
        self,
        method: str,
        location_text: str = "",
        geolocator: BrowserGeolocation | None = None,
    ) -> LocatorResult | None:
        """
        Return the bot reply for a search, or None for a blank manual query.

        `geolocator` is None when the browser has no geolocation support.
        Failures never raise; they become a reply pointing to manual search.
        """
        if method == "manual":
            if not location_text.strip():
                return None
            return LocatorResult(
                f'Okay, here are the results for "{location_text}".',
                "maps_link",
                build_location_search_url(location_text),
            )

        if method != "auto":
            raise ValueError(f"Unknown location method: {method!r}")

        if geolocator is None:
            return LocatorResult(GEOLOCATION_UNSUPPORTED)

        try:
            latitude, longitude = await geolocator.get_current_position()
        except GeolocationError as e:
            print(f"[Geolocation] ❌ {e}")
            return LocatorResult(GEOLOCATION_FAILED)

        return LocatorResult(NEARBY_FOUND, "maps_link", build_nearby_search_url(latitude, longitude))
