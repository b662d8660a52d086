"""Service models for the barbershop price list."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Service(BaseModel):
    """Service model."""

    id: Optional[str] = None
    title: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(default=30, ge=5, le=480)
    created_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Haircut & Wash",
                "description": "Cut, wash and styling",
                "price": 350,
                "duration_minutes": 45,
            }
        }


class ServiceCreate(BaseModel):
    """Service creation model."""

    title: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(default=30, ge=5, le=480)


class ServiceUpdate(BaseModel):
    """Partial service update."""

    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, ge=5, le=480)
