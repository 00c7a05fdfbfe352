from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LineConfig:
    # Empty credentials keep the app importable; LINE rejects the calls instead
    channel_secret: str = os.getenv("CHANNEL_SECRET", "")
    channel_access_token: str = os.getenv("CHANNEL_ACCESS_TOKEN", "")


DEFAULT_LINE_CONFIG = LineConfig()
