"""
World time lookup client.
Resolves a city name to its current local time through the api-ninjas
worldtime endpoint.
"""

from typing import Optional

import httpx
from pydantic import BaseModel, Field

from yourtyme.core.config import settings
from yourtyme.core.exceptions import (
    CityNotFoundError,
    ConfigError,
    UpstreamTransientError,
)
from yourtyme.core.logging import get_logger

logger = get_logger(__name__)


class WorldTime(BaseModel):
    """Current local time of a city."""

    datetime: str = Field(..., description="Local date and time, e.g. 2024-01-01 10:00:00")
    timezone: str = Field(..., description="IANA timezone name")
    day_of_week: Optional[str] = Field(None, description="Weekday name")
    date: Optional[str] = Field(None, description="Local date")

    class Config:
        extra = "allow"


class WorldTimeClient:
    """HTTP client for the world time service."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.WORLDTIME_API_URL
        self.api_key = api_key if api_key is not None else settings.API_NINJAS_KEY
        self.timeout = timeout or settings.WORLDTIME_TIMEOUT_SECONDS
        self._transport = transport

    async def lookup(self, city: str) -> WorldTime:
        """
        Look up the current time of a city.

        Args:
            city: City name as entered by the user

        Returns:
            WorldTime for the city

        Raises:
            CityNotFoundError: If the service does not know the city
            UpstreamTransientError: On network errors or server-side failures
            ConfigError: If no API key is configured
        """
        if not self.api_key:
            raise ConfigError("API_NINJAS_KEY is not configured")

        city = city.strip()
        if not city:
            raise CityNotFoundError(city)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(
                    self.api_url,
                    params={"city": city},
                    headers={"X-Api-Key": self.api_key},
                )
        except httpx.HTTPError as exc:
            logger.error(f"World time request failed for {city}: {exc}")
            raise UpstreamTransientError(
                "World time service unreachable", details={"city": city}
            )

        if response.status_code in (400, 404):
            logger.info(f"World time service does not know city: {city}")
            raise CityNotFoundError(city)
        if response.status_code >= 400:
            logger.error(
                f"World time lookup failed with status {response.status_code}: {response.text}"
            )
            raise UpstreamTransientError(
                "World time service error",
                details={"city": city, "status_code": response.status_code},
            )

        data = response.json()
        if not data or "datetime" not in data or "timezone" not in data:
            raise CityNotFoundError(city)
        return WorldTime(**data)


# Global client instance
worldtime_client = WorldTimeClient()
