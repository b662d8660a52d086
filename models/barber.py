"""Barber models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Barber(BaseModel):
    """Barber model."""

    id: Optional[str] = None
    name: str
    nickname: Optional[str] = None
    phone: Optional[str] = None
    branch: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Anan Srisuk",
                "nickname": "Nan",
                "branch": "siam",
                "is_active": True,
            }
        }


class BarberCreate(BaseModel):
    """Barber creation model."""

    name: str
    nickname: Optional[str] = None
    phone: Optional[str] = None
    branch: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True


class BarberUpdate(BaseModel):
    """Partial barber update; only fields sent by the admin page are applied."""

    name: Optional[str] = None
    nickname: Optional[str] = None
    phone: Optional[str] = None
    branch: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
