from pydantic import BaseModel
from typing import List, Optional


class ParseTripContext(BaseModel):
    name: str = "Trip"
    destination: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    traveler_info: Optional[str] = None


class ParseItineraryRequest(BaseModel):
    raw_text: Optional[str] = None
    trip_context: Optional[ParseTripContext] = None


class ParsedLocation(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    category: Optional[str] = None
    description: Optional[str] = None
    confidence: str = "low"
    original_text: Optional[str] = None


class ParsedActivity(BaseModel):
    id: str
    location_name: Optional[str] = None
    location_id: str = ""
    start_time: str
    end_time: str
    notes: Optional[str] = None
    is_flexible: bool = True
    original_text: Optional[str] = None


class ParsedDay(BaseModel):
    date: str
    title: Optional[str] = None
    activities: List[ParsedActivity] = []


class ParsedItinerary(BaseModel):
    locations: List[ParsedLocation] = []
    days: List[ParsedDay] = []
    warnings: List[str] = []
    suggestions: List[str] = []


class ParseItineraryResponse(BaseModel):
    success: bool
    parsed: Optional[ParsedItinerary] = None
    error: Optional[str] = None
