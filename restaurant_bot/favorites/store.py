from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from .models import Favorite, FavoriteRecord


class FavoritesStore:
    """Per-user saved places. All methods may raise ``SQLAlchemyError``."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def list_by_user(self, user_id: str) -> list[Favorite]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(FavoriteRecord)
                .where(FavoriteRecord.line_user_id == user_id)
                .order_by(FavoriteRecord.id)
            ).all()
            return [Favorite.model_validate(row) for row in rows]

    def add(
        self,
        user_id: str,
        restaurant_id: str,
        name: str,
        address: str,
        latitude: float,
        longitude: float,
    ) -> Favorite:
        record = FavoriteRecord(
            line_user_id=user_id,
            restaurant_id=restaurant_id,
            name=name,
            address=address,
            latitude=latitude,
            longitude=longitude,
        )
        with self._session_factory() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            return Favorite.model_validate(record)

    def delete(self, user_id: str, restaurant_id: str) -> int:
        """Delete one (user, restaurant) favorite; returns rows affected."""
        with self._session_factory() as session:
            target = session.scalars(
                select(FavoriteRecord.id)
                .where(
                    FavoriteRecord.line_user_id == user_id,
                    FavoriteRecord.restaurant_id == restaurant_id,
                )
                .limit(1)
            ).first()
            if target is None:
                return 0
            result = session.execute(delete(FavoriteRecord).where(FavoriteRecord.id == target))
            session.commit()
            return result.rowcount or 0

    def exists(self, user_id: str, restaurant_id: str) -> bool:
        with self._session_factory() as session:
            found = session.scalars(
                select(FavoriteRecord.id)
                .where(
                    FavoriteRecord.line_user_id == user_id,
                    FavoriteRecord.restaurant_id == restaurant_id,
                )
                .limit(1)
            ).first()
            return found is not None

