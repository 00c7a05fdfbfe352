from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(ENV_FILE)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class ServerConfig:
    port: int = int(os.getenv("PORT", "3000"))
    host: str = os.getenv("HOST", "0.0.0.0")
    is_local: bool = _env_flag("IS_LOCAL")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    ngrok_authtoken: str = os.getenv("NGROK_AUTHTOKEN", "")


DEFAULT_SERVER_CONFIG = ServerConfig()
