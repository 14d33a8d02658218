"""Process-wide default GatewayConfig.

Clients that are not handed an explicit ``GatewayConfig`` read this one.
Set it up once at start-up via ``configure()``; it is not locked.
"""

from __future__ import annotations

from dataclasses import fields

from trip_planner.gateway.errors import ConfigurationError
from trip_planner.gateway.types import GatewayConfig

_config: GatewayConfig | None = None

_FIELD_NAMES = frozenset(f.name for f in fields(GatewayConfig))


def get_config() -> GatewayConfig:
    global _config
    if _config is None:
        _config = GatewayConfig()
    return _config


def configure(**overrides) -> GatewayConfig:
    """Set attributes on the shared config, e.g. ``configure(api_key="sk-or-...")``."""
    unknown = set(overrides) - _FIELD_NAMES
    if unknown:
        raise ConfigurationError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

    config = get_config()
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


def load_from_settings(settings=None) -> GatewayConfig:
    """Fill the shared config from application settings (env / .env)."""
    if settings is None:
        from trip_planner.core.config import settings
    loaded = GatewayConfig.from_settings(settings)
    config = get_config()
    config.api_key = loaded.api_key
    config.timeout = loaded.timeout
    config.max_retries = loaded.max_retries
    config.api_url = loaded.api_url
    config.default_model = loaded.default_model
    return config


def reset_config() -> GatewayConfig:
    global _config
    _config = GatewayConfig()
    return _config
