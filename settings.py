# settings.py
"""
Environment-driven configuration for the subscription viewer.

Values come from process environment variables. A local `.env` file is
honoured by the entry points (main.py / create_app) through python-dotenv.
Empty strings are treated as unset.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


def _env(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    v = environ.get(name)
    return v if v not in ("", None) else default


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    azure_client_id: Optional[str] = None
    storage_url: Optional[str] = None
    cosmos_endpoint: Optional[str] = None
    app_version: str = "1.0.0"
    environment: str = "Production"
    debug: bool = False

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        azure_client_id=_env(env, "AZURE_CLIENT_ID"),
        storage_url=_env(env, "STORAGE_URL"),
        cosmos_endpoint=_env(env, "AZURE_COSMOS_DB_NOSQL_ENDPOINT"),
        app_version=_env(env, "APP_VERSION", "1.0.0"),
        environment=_env(env, "APP_ENV", "Production"),
        debug=_flag(_env(env, "HELLO_AZD_DEBUG")),
    )
