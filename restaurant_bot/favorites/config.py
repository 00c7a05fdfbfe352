from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class FavoritesConfig:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./favorites.db")
    echo: bool = False


DEFAULT_FAVORITES_CONFIG = FavoritesConfig()
