"""YAML configuration loader with environment variable overrides.

Configuration is loaded in layers, later layers winning:

  1. ``config/config.yaml`` -- defaults checked into the repo
  2. ``.env`` file          -- local overrides (not committed)
  3. Environment variables  -- set at deploy time

Only settings explicitly provided by layers 2 and 3 override the YAML, so a
value in ``config.yaml`` is not clobbered by a Settings default.

    base      = {"meetup": {"lead_minutes": 15, "max_candidates": 8}}
    overrides = {"meetup": {"lead_minutes": 20}}
    result    = {"meetup": {"lead_minutes": 20, "max_candidates": 8}}
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from festmeet.config.settings import Settings
from festmeet.utils.errors import ConfigurationError

# Settings field -> (config section, key)
_SETTINGS_MAP: dict[str, tuple[str, str]] = {
    "app_env": ("app", "env"),
    "log_level": ("logging", "level"),
    "tesseract_cmd": ("recognition", "tesseract_cmd"),
    "ocr_char_whitelist": ("recognition", "char_whitelist"),
    "ocr_page_segmentation_mode": ("recognition", "page_segmentation_mode"),
    "ocr_min_confidence": ("recognition", "min_confidence"),
    "meetup_lead_minutes": ("meetup", "lead_minutes"),
    "meetup_min_overlap_minutes": ("meetup", "min_overlap_minutes"),
    "meetup_max_window_minutes": ("meetup", "max_window_minutes"),
    "meetup_max_candidates": ("meetup", "max_candidates"),
    "festival_day_start_hour": ("meetup", "festival_day_start_hour"),
    "festival_day_end_hour": ("meetup", "festival_day_end_hour"),
    "festival_clock_day_start_hour": ("meetup", "clock_day_start_hour"),
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge environment-based Settings over it.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            an empty base.
        settings: Pre-built settings; read from the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML cannot be parsed, is not a mapping,
            or the environment holds invalid values.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Cannot parse {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    if settings is None:
        try:
            settings = Settings()
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc

    _deep_merge(yaml_config, _settings_overrides(settings))
    return yaml_config


def _settings_overrides(settings: Settings) -> dict:
    """Nested override dict holding only the fields actually provided."""
    overrides: dict = {}
    for field_name in settings.model_fields_set:
        target = _SETTINGS_MAP.get(field_name)
        if target is None:
            continue
        section, key = target
        overrides.setdefault(section, {})[key] = getattr(settings, field_name)
    return overrides


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
