"""
Configuration parser for kalpager.

Handles TOML file parsing into dataclasses with defaults.
"""

import math
import tomllib
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from .scrollers import Curve


class ConfigError(ValueError):
    """An invalid value in the configuration file."""


def _read_number(section_data: dict, section: str, key: str, default, kind=int):
    """Read an int (or, with kind=float, any real number) from a config section."""
    value = section_data.get(key, default)
    accepted = (int, float) if kind is float else int
    if isinstance(value, bool) or not isinstance(value, accepted):
        raise ConfigError(f"{section}.{key}: expected a number, got {value!r}")
    return kind(value)


@dataclass
class GeneralConfig:
    """Process-wide settings."""
    timezone: str = "Europe/Amsterdam"
    debug: bool = False   # Diagnostics on stderr
    strict: bool = False  # Precondition violations raise instead of being no-ops


@dataclass
class NavigationConfig:
    """Defaults for navigation; passed to NavigationState and ViewController."""
    animation_duration_ms: int = 300
    animation_curve: Curve = Curve.EASE
    fallback_range_span_days: int = 250  # Overall range is today +/- this when none is given
    first_weekday: int = 0               # 0=Monday .. 6=Sunday
    height_per_minute: float = 1.0       # Initial zoom of time-axis views (60px per hour)


@dataclass
class LayoutConfig:
    """Configuration for tile layout."""
    min_event_minutes: int = 30  # Height claimed by zero-duration events


@dataclass
class Config:
    """Main configuration container for kalpager."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'kalpager' / 'kalpager.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        # Parse General section
        general_data = data.get('General', {})
        general = GeneralConfig(
            timezone=general_data.get('timezone', GeneralConfig.timezone),
            debug=bool(general_data.get('debug', GeneralConfig.debug)),
            strict=bool(general_data.get('strict', GeneralConfig.strict)),
        )

        # Parse Navigation section
        nav_data = data.get('Navigation', {})
        curve_name = nav_data.get('animation_curve', NavigationConfig.animation_curve.value)
        try:
            curve = Curve(curve_name)
        except ValueError:
            raise ConfigError(f"Navigation.animation_curve: unknown curve '{curve_name}'")

        navigation = NavigationConfig(
            animation_duration_ms=_read_number(nav_data, 'Navigation', 'animation_duration_ms', NavigationConfig.animation_duration_ms),
            animation_curve=curve,
            fallback_range_span_days=_read_number(nav_data, 'Navigation', 'fallback_range_span_days', NavigationConfig.fallback_range_span_days),
            first_weekday=_read_number(nav_data, 'Navigation', 'first_weekday', NavigationConfig.first_weekday),
            height_per_minute=_read_number(nav_data, 'Navigation', 'height_per_minute', NavigationConfig.height_per_minute, float),
        )
        if navigation.animation_duration_ms <= 0:
            raise ConfigError("Navigation.animation_duration_ms must be greater than 0")
        if navigation.fallback_range_span_days < 0:
            raise ConfigError("Navigation.fallback_range_span_days must not be negative")
        if not 0 <= navigation.first_weekday <= 6:
            raise ConfigError("Navigation.first_weekday must be 0..6")
        if not math.isfinite(navigation.height_per_minute) or navigation.height_per_minute <= 0:
            raise ConfigError("Navigation.height_per_minute must be greater than 0")

        # Parse Layout section
        layout_data = data.get('Layout', {})
        layout = LayoutConfig(
            min_event_minutes=_read_number(layout_data, 'Layout', 'min_event_minutes', LayoutConfig.min_event_minutes),
        )
        if layout.min_event_minutes < 0:
            raise ConfigError("Layout.min_event_minutes must not be negative")

        return cls(general=general, navigation=navigation, layout=layout)
