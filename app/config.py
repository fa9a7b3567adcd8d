"""
Configuration management for the trip planner.
Supports multiple weather providers: OpenWeatherMap, WeatherAPI, Open-Meteo.
"""
from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = True
    log_level: str = "INFO"

    # Public base URL used when building share / invitation links
    app_url: str = "https://app.example.com"

    # Sharing
    invitation_ttl_days: int = 7
    public_link_ttl_days: int = 30

    # Google Maps Configuration
    google_maps_api_key: str = ""
    google_places_api_key: str = ""
    places_search_radius_m: int = 50000

    # Weather Configuration
    weather_provider: Literal["openweathermap", "weatherapi", "open-meteo"] = "open-meteo"
    weather_api_key: str = ""
    weather_units: str = "metric"

    # HTTP client
    http_timeout_seconds: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()


def get_maps_config() -> dict:
    """Get Google Maps configuration."""
    return {
        "api_key": settings.google_maps_api_key,
        # Places falls back to the Maps key when no dedicated key is set
        "places_api_key": settings.google_places_api_key or settings.google_maps_api_key,
        "radius": settings.places_search_radius_m,
        "timeout": settings.http_timeout_seconds,
    }


def get_weather_config() -> dict:
    """Get weather configuration based on provider."""
    config = {
        "provider": settings.weather_provider,
        "api_key": settings.weather_api_key,
        "units": settings.weather_units,
        "timeout": settings.http_timeout_seconds,
    }

    # Set base URL based on provider
    if settings.weather_provider == "openweathermap":
        config["base_url"] = "https://api.openweathermap.org/data/2.5/forecast"
    elif settings.weather_provider == "weatherapi":
        config["base_url"] = "https://api.weatherapi.com/v1/forecast.json"
    else:  # open-meteo
        config["base_url"] = "https://api.open-meteo.com/v1/forecast"

    return config
