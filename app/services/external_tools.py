"""
External Tools Service.
Handles interactions with Google Maps, OpenStreetMap and the weather providers
(OpenWeatherMap, WeatherAPI, Open-Meteo).
"""
import httpx
import logging
from datetime import date, datetime, timezone
from typing import List, Dict, Optional, Tuple

from ..config import get_maps_config, get_weather_config
from ..exceptions import ExternalServiceError, NotFoundError, ValidationFailedError
from ..models.places import Directions, PlaceResult, WeatherData

logger = logging.getLogger(__name__)

DIRECTION_MODES = ("driving", "walking", "transit", "bicycling")


class _HttpService:
    """Shared request handling for the third-party clients."""

    service_name = "External API"

    def __init__(self, transport: httpx.AsyncBaseTransport = None, timeout: float = 10.0):
        # transport is injectable so tests can use httpx.MockTransport
        self.transport = transport
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.timeout)

    async def _get_json(self, url: str, params: dict, headers: dict = None):
        async with self._client() as client:
            try:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPError as e:
                logger.error(f"{self.service_name} Error: {e}")
                raise ExternalServiceError(f"{self.service_name} request failed") from e
            except ValueError as e:
                logger.error(f"{self.service_name} returned invalid JSON: {e}")
                raise ExternalServiceError(f"{self.service_name} returned an invalid response") from e


class GoogleMapsService(_HttpService):
    """Places search, directions and geocoding."""

    service_name = "Google Maps"
    base_url = "https://maps.googleapis.com/maps/api"
    osm_url = "https://nominatim.openstreetmap.org/search"

    def __init__(self, transport: httpx.AsyncBaseTransport = None):
        config = get_maps_config()
        super().__init__(transport=transport, timeout=config["timeout"])
        self.api_key = config["api_key"]
        self.places_api_key = config["places_api_key"]
        self.radius = config["radius"]

    def _check_status(self, data: dict):
        status = data.get("status", "OK")
        if status not in ("OK", "ZERO_RESULTS"):
            message = data.get("error_message", status)
            logger.error(f"Google Maps Error: {message}")
            raise ExternalServiceError(f"Google Maps request failed: {status}")

    async def search_places(self, query: str, lat: float = None, lng: float = None) -> List[PlaceResult]:
        """
        Search for places with the Places text search API.
        Results are biased around (lat, lng) when both are given.
        """
        if not self.places_api_key:
            raise ExternalServiceError("Google Places API key is not configured")

        params = {"query": query, "key": self.places_api_key}
        if lat is not None and lng is not None:
            params["location"] = f"{lat},{lng}"
            params["radius"] = str(self.radius)

        data = await self._get_json(f"{self.base_url}/place/textsearch/json", params)
        self._check_status(data)

        results = []
        for result in data.get("results", []):
            location = result.get("geometry", {}).get("location", {})
            photos = result.get("photos") or [{}]
            results.append(PlaceResult(
                id=result.get("place_id", ""),
                name=result.get("name", ""),
                address=result.get("formatted_address", ""),
                latitude=location.get("lat", 0.0),
                longitude=location.get("lng", 0.0),
                rating=result.get("rating"),
                photo_url=photos[0].get("photo_reference"),
            ))
        return results

    async def get_directions(
        self,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
        mode: str = "driving",
    ) -> Directions:
        """Route between two (lat, lng) points."""
        if not self.api_key:
            raise ExternalServiceError("Google Maps API key is not configured")
        if mode not in DIRECTION_MODES:
            raise ValidationFailedError(f"Unsupported travel mode: {mode}")

        params = {
            "origin": f"{origin[0]},{origin[1]}",
            "destination": f"{destination[0]},{destination[1]}",
            "mode": mode,
            "key": self.api_key,
        }
        data = await self._get_json(f"{self.base_url}/directions/json", params)
        self._check_status(data)

        routes = data.get("routes", [])
        if not routes or not routes[0].get("legs"):
            raise NotFoundError("No route found between the given points")

        route = routes[0]
        leg = route["legs"][0]
        return Directions(
            distance=leg["distance"]["text"],
            duration=leg["duration"]["text"],
            duration_seconds=leg["duration"]["value"],
            polyline=route.get("overview_polyline", {}).get("points", ""),
        )

    async def get_osm_places(self, query: str, limit: int = 5) -> List[Dict]:
        """
        Search for places using OpenStreetMap (Nominatim).
        """
        params = {
            "q": query,
            "format": "json",
            "limit": limit
        }
        # Nominatim requires a user-agent
        headers = {"User-Agent": "TripPlanner/1.0"}
        return await self._get_json(self.osm_url, params, headers=headers)

    async def geocode(self, place_name: str) -> Optional[Tuple[float, float]]:
        """
        Get (lat, lon) for a place name.
        Uses Google Places when a key is configured, OpenStreetMap otherwise.
        """
        if self.places_api_key:
            places = await self.search_places(place_name)
            if places:
                return places[0].latitude, places[0].longitude
            return None

        results = await self.get_osm_places(place_name, limit=1)
        if results:
            # OSM returns lat/lon as strings
            try:
                return float(results[0]["lat"]), float(results[0]["lon"])
            except (ValueError, KeyError):
                logger.warning(f"OSM returned unusable coordinates for {place_name}")
        return None


def _open_meteo_condition(code: int) -> str:
    """Simple weather code mapping."""
    condition = "Clear"
    if code > 0:
        condition = "Cloudy"
    if code >= 51:
        condition = "Rainy"
    if code >= 71:
        condition = "Snowy"
    if code >= 95:
        condition = "Stormy"
    return condition


class WeatherService(_HttpService):
    """Daily forecast from the configured weather provider."""

    def __init__(self, transport: httpx.AsyncBaseTransport = None):
        config = get_weather_config()
        super().__init__(transport=transport, timeout=config["timeout"])
        self.provider = config["provider"]
        self.api_key = config["api_key"]
        self.units = config["units"]
        self.base_url = config["base_url"]
        self.service_name = f"Weather ({self.provider})"

    async def get_weather_forecast(
        self,
        latitude: float,
        longitude: float,
        day: date,
        location_name: str = "",
    ) -> WeatherData:
        """Fetch the forecast for one day at a point."""
        location_name = location_name or f"{latitude},{longitude}"
        if self.provider == "openweathermap":
            return await self._get_openweather_forecast(latitude, longitude, day, location_name)
        elif self.provider == "weatherapi":
            return await self._get_weatherapi_forecast(latitude, longitude, day, location_name)
        return await self._get_open_meteo_forecast(latitude, longitude, day, location_name)

    def _require_key(self):
        if not self.api_key:
            raise ExternalServiceError(f"No API key configured for weather provider {self.provider}")

    async def _get_openweather_forecast(self, latitude, longitude, day, location_name) -> WeatherData:
        self._require_key()
        data = await self._get_json(self.base_url, {
            "lat": latitude,
            "lon": longitude,
            "units": self.units,
            "appid": self.api_key,
        })

        for forecast in data.get("list", []):
            forecast_day = datetime.fromtimestamp(forecast["dt"], tz=timezone.utc).date()
            if forecast_day == day:
                weather = (forecast.get("weather") or [{}])[0]
                return WeatherData(
                    location=location_name,
                    date=day,
                    temperature=forecast.get("main", {}).get("temp"),
                    condition=weather.get("main", "Unknown"),
                    humidity=forecast.get("main", {}).get("humidity"),
                    wind_speed=forecast.get("wind", {}).get("speed"),
                    description=weather.get("description"),
                )
        raise NotFoundError(f"No forecast available for {day.isoformat()}")

    async def _get_weatherapi_forecast(self, latitude, longitude, day, location_name) -> WeatherData:
        self._require_key()
        data = await self._get_json(self.base_url, {
            "key": self.api_key,
            "q": f"{latitude},{longitude}",
            "dt": day.isoformat(),
        })

        forecast_days = data.get("forecast", {}).get("forecastday", [])
        if not forecast_days:
            raise NotFoundError(f"No forecast available for {day.isoformat()}")

        day_forecast = forecast_days[0]["day"]
        condition = day_forecast.get("condition", {}).get("text", "Unknown")
        return WeatherData(
            location=location_name,
            date=day,
            temperature=day_forecast.get("avgtemp_c"),
            condition=condition,
            humidity=day_forecast.get("avghumidity"),
            wind_speed=day_forecast.get("maxwind_kph"),
            description=condition,
        )

    async def _get_open_meteo_forecast(self, latitude, longitude, day, location_name) -> WeatherData:
        """Open-Meteo needs no API key."""
        data = await self._get_json(self.base_url, {
            "latitude": latitude,
            "longitude": longitude,
            "daily": "weather_code,temperature_2m_max,temperature_2m_min,"
                     "relative_humidity_2m_mean,wind_speed_10m_max",
            "timezone": "auto",
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
        })

        daily = data.get("daily", {})
        dates = daily.get("time", [])
        if day.isoformat() not in dates:
            raise NotFoundError(f"No forecast available for {day.isoformat()}")

        i = dates.index(day.isoformat())
        max_temp = daily.get("temperature_2m_max", [None])[i]
        min_temp = daily.get("temperature_2m_min", [None])[i]
        temperature = None
        if max_temp is not None and min_temp is not None:
            temperature = round((max_temp + min_temp) / 2, 1)
        condition = _open_meteo_condition(daily.get("weather_code", [0])[i] or 0)

        return WeatherData(
            location=location_name,
            date=day,
            temperature=temperature,
            condition=condition,
            humidity=(daily.get("relative_humidity_2m_mean") or [None])[i],
            wind_speed=(daily.get("wind_speed_10m_max") or [None])[i],
            description=f"{condition} ({min_temp}°C to {max_temp}°C)",
        )


class PlaceRecommendationEngine:
    """Recommends places around a point by category and minimum rating."""

    def __init__(self, maps: GoogleMapsService = None):
        self.maps = maps or GoogleMapsService()

    async def recommend_places(
        self,
        latitude: float,
        longitude: float,
        categories: List[str] = None,
        min_rating: float = None,
    ) -> List[PlaceResult]:
        categories = categories or ["tourist_attraction"]
        recommendations: Dict[str, PlaceResult] = {}

        for category in categories:
            results = await self.maps.search_places(category, latitude, longitude)
            for place in results:
                if min_rating is not None and (place.rating or 0) < min_rating:
                    continue
                recommendations.setdefault(place.id, place)

        return sorted(recommendations.values(), key=lambda p: p.rating or 0, reverse=True)


# Global instances
maps_service = None
weather_service = None
recommendation_engine = None


def get_maps_service() -> GoogleMapsService:
    """Get or create the global maps service."""
    global maps_service
    if maps_service is None:
        maps_service = GoogleMapsService()
    return maps_service


def get_weather_service() -> WeatherService:
    """Get or create the global weather service."""
    global weather_service
    if weather_service is None:
        weather_service = WeatherService()
    return weather_service


def get_recommendation_engine() -> PlaceRecommendationEngine:
    """Get or create the global recommendation engine."""
    global recommendation_engine
    if recommendation_engine is None:
        recommendation_engine = PlaceRecommendationEngine(get_maps_service())
    return recommendation_engine
