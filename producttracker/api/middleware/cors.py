"""
CORS Configuration

The frontend sends its token in the ``x-auth-token`` header rather than a
cookie, so credentials are never allowed and development can accept any
origin. Other environments only accept the origins listed in
``CORS_ALLOWED_ORIGINS`` plus their defaults.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


# Browsers must see these on cross-origin responses
EXPOSED_HEADERS = ["X-Request-ID", "Content-Disposition"]


@dataclass
class CORSConfig:
    """Cross-origin policy for one environment."""

    allowed_origins: List[str] = field(default_factory=list)
    allowed_methods: List[str] = field(default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"])
    allowed_headers: List[str] = field(default_factory=lambda: ["Accept", "Content-Type", "x-auth-token", "X-Request-ID"])
    max_age: int = 3600

    def with_origins(self, extra: List[str]) -> "CORSConfig":
        if "*" in self.allowed_origins:
            return self
        merged = self.allowed_origins + [o for o in extra if o not in self.allowed_origins]
        return CORSConfig(
            allowed_origins=merged,
            allowed_methods=list(self.allowed_methods),
            allowed_headers=list(self.allowed_headers),
            max_age=self.max_age,
        )


DEFAULT_ORIGINS = {
    "development": ["*"],
    "test": ["http://localhost:3000"],
    "production": [],
}


def parse_origins(raw: str) -> List[str]:
    """Split a comma-separated origin list."""
    return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]


def get_cors_config(environment: Optional[str] = None) -> CORSConfig:
    """Policy for ``environment`` (defaults to ``PRODUCTTRACKER_ENV``)."""
    environment = environment or os.getenv("PRODUCTTRACKER_ENV", "development")
    base = CORSConfig(
        allowed_origins=list(DEFAULT_ORIGINS.get(environment, DEFAULT_ORIGINS["production"])),
        max_age=7200 if environment == "production" else 3600,
    )
    return base.with_origins(parse_origins(os.getenv("CORS_ALLOWED_ORIGINS", "")))


def setup_cors(app: FastAPI, config: Optional[CORSConfig] = None) -> None:
    config = config or get_cors_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=False,
        allow_methods=config.allowed_methods,
        allow_headers=config.allowed_headers,
        expose_headers=EXPOSED_HEADERS,
        max_age=config.max_age,
    )
