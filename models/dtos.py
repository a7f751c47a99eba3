import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrekFilters(BaseModel):
    accommodation: Optional[str] = None
    difficulty: Optional[str] = None
    altitude: Optional[str] = None
    technical: Optional[str] = None


class StartRequest(BaseModel):
    location: str = Field(min_length=1)


class FinalizeRequest(BaseModel):
    location: str = Field(min_length=1)
    filters: TrekFilters
    comments: Optional[str] = None
    title: Optional[str] = None


class ItineraryCreate(BaseModel):
    title: str = Field(min_length=1)
    location: str = Field(min_length=1)
    content: str = Field(min_length=1)
    filters: TrekFilters = Field(default_factory=TrekFilters)
    comments: Optional[str] = None


class ItineraryUpdate(BaseModel):
    title: Optional[str] = None
    location: Optional[str] = None
    content: Optional[str] = None
    filters: Optional[TrekFilters] = None
    comments: Optional[str] = None


class ItineraryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    location: str
    filters: dict[str, Any] = Field(default_factory=dict)
    comments: Optional[str] = None
    content: str
    type: str
    trek_id: Optional[str] = None
    trek_details: Optional[dict[str, Any]] = None
    created_at: datetime
    last_viewed: datetime


class Preferences(BaseModel):
    dark_mode: bool = False
    default_difficulty: Literal["easy", "moderate", "challenging", ""] = ""
    default_accommodation: Literal["camping", "hostel", "hotel", "guesthouse", ""] = ""


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    preferences: Optional[Preferences] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    subscription_status: str
    billing_interval: Optional[str] = None
    subscription_start: Optional[datetime] = None
    subscription_end: Optional[datetime] = None
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    last_login: Optional[datetime] = None


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price_id: str = Field(alias="priceId", min_length=1)
    billing_interval: Literal["monthly", "annual"] = Field(default="monthly", alias="billingInterval")


class ChangePlanRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_price_id: str = Field(alias="newPriceId", min_length=1)
