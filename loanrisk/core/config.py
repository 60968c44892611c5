"""Configuration loading for YAML settings with environment overrides."""

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
import yaml

from .logging_config import get_logger


logger = get_logger(__name__)
_BASE_DIR = Path(__file__).resolve().parent.parent
_CONFIG_PATH = _BASE_DIR / "config.yml"

DEFAULT_MODEL_NAME = "gemini-1.5-flash"
DEFAULT_CACHE_TTL_HOURS = 24


@dataclass(frozen=True)
class AppSettings:
    """Runtime settings for the risk core."""

    app_name: str
    log_level: str
    gemini_api_key: Optional[str]
    gemini_model_name: str
    cache_ttl_hours: int
    firebase_enabled: bool
    firebase_project_id: Optional[str]
    firebase_credentials_path: Optional[str]
    users_collection: str
    loans_collection: str
    installments_collection: str
    risk_profiles_collection: str

    @property
    def oracle_configured(self) -> bool:
        """Whether an oracle credential is available."""
        return bool(self.gemini_api_key)


def _to_bool(value: Any, default: bool = False) -> bool:
    """Convert value to bool with a default fallback."""
    try:
        if isinstance(value, bool):
            return value
        return value.strip().lower() in {"1", "true", "yes", "on"}
    except (AttributeError, ValueError):
        logger.warning("Invalid boolean value '%s'. Using default=%s", value, default)
        return default


def _to_int(value: Any, default: int) -> int:
    """Convert value to int with a default fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Invalid integer value '%s'. Using default=%s", value, default)
        return default


def _blank_to_none(value: Any) -> Optional[str]:
    """Treat empty strings from YAML or the environment as unset."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _read_config(path: Path) -> dict:
    """Read and parse YAML configuration."""
    try:
        with path.open("r", encoding="utf-8") as config_file:
            config_data = yaml.safe_load(config_file) or {}
        logger.info("Configuration loaded from %s", path)
        return config_data
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Falling back to defaults.", path)
        return {}
    except yaml.YAMLError:
        logger.exception("Failed to parse config file %s", path)
        return {}


def load_settings(config_path: Optional[str] = None) -> AppSettings:
    """Load settings from ``config.yml`` and the process environment.

    Environment variables win over YAML values. A missing ``GEMINI_API_KEY``
    is not an error here; oracle calls fail later with a configuration error.

    Args:
        config_path: Optional override for the YAML file location.

    Returns:
        AppSettings: Frozen settings instance.
    """
    load_dotenv()
    config = _read_config(Path(config_path) if config_path else _CONFIG_PATH)
    app_cfg = config.get("app", {}) or {}
    gemini_cfg = config.get("gemini", {}) or {}
    firebase_cfg = config.get("firebase", {}) or {}
    collections_cfg = firebase_cfg.get("collections", {}) or {}

    gemini_api_key = _blank_to_none(os.getenv("GEMINI_API_KEY", gemini_cfg.get("api_key")))
    gemini_model_name = _blank_to_none(os.getenv("GEMINI_MODEL_NAME", gemini_cfg.get("model_name")))
    if gemini_api_key is None:
        logger.warning("GEMINI_API_KEY is not set. Oracle calls will fail until it is configured.")

    firebase_enabled = _to_bool(os.getenv("FIREBASE_ENABLED", firebase_cfg.get("enabled", False)), False)

    return AppSettings(
        app_name=str(app_cfg.get("name", "Loan Risk Core")),
        log_level=str(os.getenv("LOG_LEVEL", app_cfg.get("log_level", "INFO"))),
        gemini_api_key=gemini_api_key,
        gemini_model_name=gemini_model_name or DEFAULT_MODEL_NAME,
        cache_ttl_hours=_to_int(gemini_cfg.get("cache_ttl_hours", DEFAULT_CACHE_TTL_HOURS), DEFAULT_CACHE_TTL_HOURS),
        firebase_enabled=firebase_enabled,
        firebase_project_id=_blank_to_none(os.getenv("FIREBASE_PROJECT_ID", firebase_cfg.get("project_id"))),
        firebase_credentials_path=_blank_to_none(
            os.getenv("FIREBASE_CREDENTIALS_PATH", firebase_cfg.get("credentials_path"))
        ),
        users_collection=str(collections_cfg.get("users", "users")),
        loans_collection=str(collections_cfg.get("loans", "loans")),
        installments_collection=str(collections_cfg.get("installments", "installments")),
        risk_profiles_collection=str(collections_cfg.get("risk_profiles", "risk_profiles")),
    )
