"""
IP Geolocation

Best-effort lookup of a visitor's city, region and country through the
ip-api.com JSON API. Lookups never raise: any failure yields None and the
recorder stores the "Unknown, Unknown, Unknown" sentinel instead.
"""

import ipaddress
import logging
from typing import Optional, TypedDict

import httpx

from shorturl.core.setting import settings

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
UNKNOWN_GEOLOCATION = f"{UNKNOWN}, {UNKNOWN}, {UNKNOWN}"
IP_ADDRESS_MAX_LENGTH = 50


class GeoData(TypedDict):
    city: str
    region: str
    country: str


def is_public_ip(ip: str) -> bool:
    """True when ``ip`` parses as a globally routable address."""
    try:
        address = ipaddress.ip_address(ip)
    except (TypeError, ValueError):
        return False
    return address.is_global


def normalize_ip(ip: Optional[str]) -> str:
    """
    Canonical text form of ``ip``, or "Unknown" when it is not an IP address.

    The result always fits the url_analytics.ip_address column.
    """
    try:
        address = str(ipaddress.ip_address((ip or "").strip()))
    except ValueError:
        return UNKNOWN
    if len(address) > IP_ADDRESS_MAX_LENGTH:
        return UNKNOWN
    return address


def format_geolocation(geo: Optional[GeoData]) -> str:
    """Render a lookup result as "city, region, country"."""
    if not geo:
        return UNKNOWN_GEOLOCATION
    return f"{geo['city']}, {geo['region']}, {geo['country']}"


class GeoLocator:
    """
    Geolocation collaborator backed by ip-api.com.

    Args:
        api_url: Base endpoint, queried as ``{api_url}/{ip}``
        timeout: Per-request timeout in seconds
        enabled: When False every lookup returns None without network I/O
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        enabled: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_url = (api_url or settings.GEOLOCATION_API_URL).rstrip("/")
        self.timeout = settings.GEOLOCATION_TIMEOUT if timeout is None else timeout
        self.enabled = settings.GEOLOCATION_ENABLED if enabled is None else enabled
        self.transport = transport

    async def lookup(self, ip: str) -> Optional[GeoData]:
        """
        Resolve an IP address to its location.

        Private, loopback and malformed addresses are not sent upstream.

        Returns:
            GeoData with "Unknown" for missing fields, or None on failure
        """
        if not self.enabled or not is_public_ip(ip):
            return None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.api_url}/{ip}",
                    params={"fields": "status,country,regionName,city"}
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Geolocation lookup failed for {ip}: {str(e)}")
            return None

        if data.get("status") != "success":
            return None

        return GeoData(
            city=data.get("city") or UNKNOWN,
            region=data.get("regionName") or UNKNOWN,
            country=data.get("country") or UNKNOWN,
        )
