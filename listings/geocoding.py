# listings/geocoding.py
import copy
import logging
from urllib.parse import quote

import requests
from django.conf import settings

from .exceptions import UpstreamDegraded

logger = logging.getLogger(__name__)

MAPBOX_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places/{query}.json"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"

DEFAULT_POINT = {"type": "Point", "coordinates": [0, 0]}


def _point(lng, lat):
    return {"type": "Point", "coordinates": [float(lng), float(lat)]}


def _mapbox_search(query, token, timeout):
    url = MAPBOX_URL.format(query=quote(query, safe=''))
    response = requests.get(
        url,
        params={'access_token': token, 'limit': 1},
        timeout=timeout
    )
    if response.status_code != 200:
        raise UpstreamDegraded(f"Mapbox returned status {response.status_code}")

    features = response.json().get('features') or []
    if not features:
        return None
    lng, lat = features[0]['geometry']['coordinates'][:2]
    return _point(lng, lat)


def _nominatim_search(query, timeout):
    response = requests.get(
        NOMINATIM_URL,
        params={'q': query, 'format': 'json', 'limit': 1},
        headers={'User-Agent': settings.GEOCODER_USER_AGENT},  # Required by Nominatim
        timeout=timeout
    )
    if response.status_code != 200:
        raise UpstreamDegraded(f"Nominatim returned status {response.status_code}")

    results = response.json()
    if not results:
        return None
    return _point(results[0]['lon'], results[0]['lat'])


def forward_geocode(location, country):
    """
    Best single point for "<location>, <country>", or None when nothing matched.

    Uses Mapbox when MAPBOX_TOKEN is configured, otherwise falls back to
    Nominatim (free, no key needed). Raises UpstreamDegraded on any transport
    or response-shape failure.
    """
    query = f"{location}, {country}"
    timeout = settings.GEOCODER_TIMEOUT
    token = settings.MAPBOX_TOKEN

    try:
        if token:
            return _mapbox_search(query, token, timeout)
        return _nominatim_search(query, timeout)
    except requests.RequestException as exc:
        raise UpstreamDegraded(f"Geocoding request failed: {exc}") from exc
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
        raise UpstreamDegraded(f"Unexpected geocoder response: {exc}") from exc


def resolve_geometry(location, country, fallback=None):
    """
    Soft-fail wrapper around forward_geocode: always returns a GeoJSON point.

    A missing match or a degraded geocoder yields a copy of ``fallback``
    (the [0, 0] point unless the caller passes the listing's current one).
    """
    fallback = fallback or DEFAULT_POINT
    try:
        point = forward_geocode(location, country)
    except UpstreamDegraded as exc:
        logger.warning("Geocoding degraded for %r, %r: %s", location, country, exc.message)
        return copy.deepcopy(fallback)

    if point is None:
        logger.info("No geocoding match for %r, %r", location, country)
        return copy.deepcopy(fallback)
    return point
