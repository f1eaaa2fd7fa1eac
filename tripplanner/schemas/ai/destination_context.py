from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime


class CountryInfo(BaseModel):
    name: str
    code: str
    timezone: str


class EmergencyNumbers(BaseModel):
    police: str
    ambulance: str
    fire: str


class SafetyInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    health_tips: List[str] = []
    cultural_etiquette: List[str] = []


class WeatherInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    climate: str
    packing_tips: List[str] = []


class CurrencyInfo(BaseModel):
    code: str
    symbol: str


class DestinationContextData(BaseModel):
    country: CountryInfo
    emergency: EmergencyNumbers
    safety: SafetyInfo
    weather: WeatherInfo
    currency: CurrencyInfo


class GenerateContextRequest(BaseModel):
    country_code: str
    country_name: str


class DestinationContextOut(BaseModel):
    country_code: str
    context: DestinationContextData
    generated_at: Optional[datetime] = None
