# foodbank/services/location.py
from __future__ import annotations
import logging
from typing import Optional, Tuple

import httpx

from foodbank.core.config import Settings, settings as default_settings
from foodbank.core.errors import ExternalSourceError
from foodbank.services.geo import as_finite

logger = logging.getLogger(__name__)

class StaticLocationSource:
    """Fixed position, e.g. coordinates typed in by the user."""

    def __init__(self, lat: float, lon: float):
        self.lat = lat
        self.lon = lon

    def request_current_location(self) -> Tuple[float, float]:
        lat, lon = as_finite(self.lat), as_finite(self.lon)
        if lat is None or lon is None:
            raise ExternalSourceError("Location unavailable")
        return lat, lon

class Geocoder:
    """
    Address -> (lat, lon) through Nominatim, OpenCage or Google,
    chosen by settings.geocoder. Raises ExternalSourceError on any failure.
    """

    def __init__(self, settings: Settings = default_settings, client: Optional[httpx.Client] = None):
        self.settings = settings
        self.client = client or httpx.Client(timeout=settings.geocode_timeout)

    def _get_json(self, url: str, params: dict, headers: Optional[dict] = None):
        try:
            r = self.client.get(url, params=params, headers=headers)
            r.raise_for_status()
            return r.json()
        except (httpx.HTTPError, ValueError) as ex:
            logger.warning("geocoder request to %s failed: %s", url, ex)
            raise ExternalSourceError(f"Geocoding failed: {ex}") from ex

    def geocode(self, address: str) -> Tuple[float, float]:
        a = (address or "").strip()
        if not a:
            raise ExternalSourceError("Empty address")
        try:
            return self._lookup(a)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as ex:
            raise ExternalSourceError(f"Unexpected geocoder response: {ex}") from ex

    def _lookup(self, a: str) -> Tuple[float, float]:
        provider = (self.settings.geocoder or "nominatim").lower()

        if provider == "opencage":
            if not self.settings.opencage_key:
                raise ExternalSourceError("OPENCAGE_KEY not set")
            js = self._get_json("https://api.opencagedata.com/geocode/v1/json",
                                {"q": a, "key": self.settings.opencage_key, "limit": 1})
            if not js.get("results"):
                raise ExternalSourceError("No results")
            g = js["results"][0]["geometry"]
            return float(g["lat"]), float(g["lng"])

        if provider == "google":
            if not self.settings.google_maps_key:
                raise ExternalSourceError("GOOGLE_MAPS_KEY not set")
            js = self._get_json("https://maps.googleapis.com/maps/api/geocode/json",
                                {"address": a, "key": self.settings.google_maps_key})
            if not js.get("results"):
                raise ExternalSourceError("No results")
            loc = js["results"][0]["geometry"]["location"]
            return float(loc["lat"]), float(loc["lng"])

        # Nominatim needs no key but wants an identifying UA
        headers = {"User-Agent": f"DigitalFoodBank/1.0 (+{self.settings.admin_contact})"}
        js = self._get_json("https://nominatim.openstreetmap.org/search",
                            {"q": a, "format": "json", "limit": 1}, headers=headers)
        if not js:
            raise ExternalSourceError("No results")
        return float(js[0]["lat"]), float(js[0]["lon"])

class GeocodeLocationSource:
    def __init__(self, address: str, geocoder: Geocoder):
        self.address = address
        self.geocoder = geocoder

    def request_current_location(self) -> Tuple[float, float]:
        return self.geocoder.geocode(self.address)
