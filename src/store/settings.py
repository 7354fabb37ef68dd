from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

ENV_FIELDS = {
    "store_url": "SCHOLARDESK_STORE_URL",
    "api_key": "SCHOLARDESK_STORE_KEY",
    "service_key": "SCHOLARDESK_SERVICE_KEY",
    "timeout_seconds": "SCHOLARDESK_TIMEOUT_SECONDS",
    "max_retries": "SCHOLARDESK_MAX_RETRIES",
}


@dataclass(frozen=True, slots=True)
class StoreSettings:
    store_url: str
    api_key: str
    service_key: str | None = None
    timeout_seconds: float = 20.0
    max_retries: int = 3
    backoff_factor: float = 0.5

    def __post_init__(self) -> None:
        if not self.store_url or not str(self.store_url).startswith(("http://", "https://")):
            raise ValueError("Store URL must start with http:// or https://.")
        if not self.api_key:
            raise ValueError("Store API key must not be empty.")
        timeout = float(self.timeout_seconds)
        if not math.isfinite(timeout) or timeout <= 0.0:
            raise ValueError("Store timeout_seconds must be a positive number.")
        if int(self.max_retries) < 0:
            raise ValueError("Store max_retries must be zero or greater.")
        if float(self.backoff_factor) < 0.0:
            raise ValueError("Store backoff_factor must be zero or greater.")

    @property
    def rest_url(self) -> str:
        return f"{self.store_url.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.store_url.rstrip('/')}/auth/v1"

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any] | None) -> StoreSettings:
        values = payload or {}
        return cls(
            store_url=str(values.get("store_url") or ""),
            api_key=str(values.get("api_key") or ""),
            service_key=values.get("service_key") or None,
            timeout_seconds=float(values.get("timeout_seconds", 20.0)),
            max_retries=int(values.get("max_retries", 3)),
            backoff_factor=float(values.get("backoff_factor", 0.5)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StoreSettings:
        env = os.environ if environ is None else environ
        values = {field: env[name] for field, name in ENV_FIELDS.items() if env.get(name)}
        return cls.from_mapping(values)

    @classmethod
    def from_json_file(cls, path: Path) -> StoreSettings:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"Settings file '{path}' must contain a JSON object.")
        return cls.from_mapping(payload)

    def to_dict(self) -> dict[str, Any]:
        """Settings with secrets masked, for run reports."""

        return {
            "store_url": self.store_url,
            "api_key": "***",
            "service_key": "***" if self.service_key else None,
            "timeout_seconds": self.timeout_seconds,
            "max_retries": self.max_retries,
            "backoff_factor": self.backoff_factor,
        }
