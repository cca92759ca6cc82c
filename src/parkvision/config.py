"""Client configuration for parkvision."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from parkvision._constants import BASE_URL, DEFAULT_REQUEST_TIMEOUT, DEFAULT_SYNC_INTERVAL
from parkvision.exceptions import ParkVisionConfigError


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ParkVisionConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ParkVisionConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the parking data service, without trailing slash.
    sync_interval : float
        Seconds between periodic refreshes. Defaults to 10 seconds.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    """

    base_url: str = BASE_URL
    sync_interval: float = DEFAULT_SYNC_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, **overrides: Any) -> ParkVisionConfig:
        """Create configuration from environment variables.

        Reads ``PARKVISION_BASE_URL``, ``PARKVISION_SYNC_INTERVAL`` and
        ``PARKVISION_REQUEST_TIMEOUT``. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ParkVisionConfig
            Populated configuration.

        Raises
        ------
        ParkVisionConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("PARKVISION_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url.rstrip("/")

        _ENV_FLOAT_MAP = {
            "PARKVISION_SYNC_INTERVAL": "sync_interval",
            "PARKVISION_REQUEST_TIMEOUT": "request_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
