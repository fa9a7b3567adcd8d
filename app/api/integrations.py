"""
API Routes for weather, places, directions and place reviews.
"""
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from .deps import get_current_user_id
from ..exceptions import NotFoundError
from ..models.places import Directions, PlaceResult, PlaceReview, ReviewCreate, WeatherData
from ..services.external_tools import (
    GoogleMapsService,
    PlaceRecommendationEngine,
    WeatherService,
    get_maps_service,
    get_recommendation_engine,
    get_weather_service,
)
from ..services.reviews import get_review_service


router = APIRouter(prefix="/api", tags=["integrations"])


class ReviewsResponse(BaseModel):
    location_id: str
    reviews: list[PlaceReview]
    average_rating: float


# Weather

@router.get("/weather", response_model=WeatherData)
async def get_weather(
    location: Optional[str] = None,
    day: Optional[date] = Query(None, alias="date"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    weather: WeatherService = Depends(get_weather_service),
    maps: GoogleMapsService = Depends(get_maps_service),
):
    """
    Weather forecast for a place on a day (defaults to today).
    Pass either lat/lon or a location name to geocode.
    """
    if lat is None or lon is None:
        if not location:
            raise HTTPException(status_code=400, detail="Provide either location or lat and lon")
        coords = await maps.geocode(location)
        if not coords:
            raise NotFoundError(f"Could not find location: {location}")
        lat, lon = coords

    return await weather.get_weather_forecast(lat, lon, day or date.today(), location or "")


# Places

@router.get("/places/search", response_model=list[PlaceResult])
async def search_places(
    query: str = Query(..., min_length=1),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    maps: GoogleMapsService = Depends(get_maps_service),
):
    return await maps.search_places(query, lat, lng)


@router.get("/places/recommendations", response_model=list[PlaceResult])
async def recommend_places(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    categories: Optional[list[str]] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    engine: PlaceRecommendationEngine = Depends(get_recommendation_engine),
):
    """Places around a point, best rated first."""
    return await engine.recommend_places(lat, lng, categories, min_rating)


@router.get("/directions", response_model=Directions)
async def get_directions(
    origin_lat: float = Query(..., ge=-90, le=90),
    origin_lng: float = Query(..., ge=-180, le=180),
    destination_lat: float = Query(..., ge=-90, le=90),
    destination_lng: float = Query(..., ge=-180, le=180),
    mode: Literal["driving", "walking", "transit", "bicycling"] = "driving",
    maps: GoogleMapsService = Depends(get_maps_service),
):
    return await maps.get_directions((origin_lat, origin_lng), (destination_lat, destination_lng), mode)


# Reviews

@router.post("/locations/{location_id}/reviews", response_model=PlaceReview, status_code=201)
async def add_review(location_id: str, payload: ReviewCreate, user_id: str = Depends(get_current_user_id)):
    return get_review_service().add_review(user_id, location_id, payload.rating, payload.comment)


@router.get("/locations/{location_id}/reviews", response_model=ReviewsResponse)
async def get_reviews(location_id: str):
    return ReviewsResponse(**get_review_service().get_reviews(location_id))
