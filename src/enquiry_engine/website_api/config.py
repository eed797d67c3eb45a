"""Environment-based configuration for the API service."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_DEFINITIONS_PATH = Path.home() / ".enquiry-engine" / "definitions.json"


@dataclass(frozen=True)
class Settings:
    """API configuration."""

    api_secret: str
    host: str = "0.0.0.0"
    port: int = 8000
    definitions_path: Path = field(default=DEFAULT_DEFINITIONS_PATH)
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'Settings':
        """Read ENQUIRY_* variables; the API secret is mandatory."""
        api_secret = os.getenv("ENQUIRY_API_SECRET", "")
        if not api_secret:
            raise RuntimeError(
                "ENQUIRY_API_SECRET environment variable is required. "
                "Generate one with: openssl rand -hex 32"
            )

        port = os.getenv("ENQUIRY_API_PORT", "8000")
        if not port.isdigit():
            raise RuntimeError(f"ENQUIRY_API_PORT must be a port number, got {port!r}")

        definitions_path = os.getenv("ENQUIRY_DEFINITIONS_PATH")
        return cls(
            api_secret=api_secret,
            host=os.getenv("ENQUIRY_API_HOST", "0.0.0.0"),
            port=int(port),
            definitions_path=Path(definitions_path) if definitions_path else DEFAULT_DEFINITIONS_PATH,
            debug=os.getenv("ENQUIRY_ENGINE_ENV", "production") != "production",
        )


_settings: Optional[Settings] = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings():
    """Drop cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


class _SettingsProxy:
    """Lazy proxy so settings aren't loaded until first access."""

    def __getattr__(self, name):
        return getattr(_get_settings(), name)


settings = _SettingsProxy()
