from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Column, DateTime, Float, Index, Integer, String, func

from .db import Base


class FavoriteRecord(Base):
    __tablename__ = "favorites"

    id = Column(Integer, primary_key=True, autoincrement=True)
    line_user_id = Column(String(64), nullable=False, index=True)
    restaurant_id = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    address = Column(String(512), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    added_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Lookup index only; (user, restaurant) uniqueness is checked by the store
    __table_args__ = (Index("ix_favorites_user_restaurant", "line_user_id", "restaurant_id"),)


class Favorite(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    line_user_id: str
    restaurant_id: str
    name: str
    address: str
    latitude: float
    longitude: float
    added_at: datetime | None = None
