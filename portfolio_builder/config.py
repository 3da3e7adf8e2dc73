"""
Site configuration.

Every design token, homepage string and image setting lives here, so the
stylesheet and pages have exactly one source of truth. Values can be
overridden from a JSON file (site.json by default); anything not set there
keeps the defaults below.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path


class ConfigError(Exception):
    """Raised when the config file cannot be read, has unknown keys or mistyped values."""


# --- Sections ---

@dataclass(frozen=True)
class ImageSettings:
    max_width: int = 1920          # full-size derivative cap
    thumbnail_width: int = 1200    # listing thumbnail cap
    quality: int = 90              # WebP quality (0-100)
    thumbnail_quality: int = 90


@dataclass(frozen=True)
class HomepageSettings:
    title: str = 'Caleb Jenkins'
    subtitle: str = '🔥 BADASS CREATIONS 🔥'
    skeleton_gif: str = 'skeleton.gif'
    flame_gif: str = 'flame.gif'


@dataclass(frozen=True)
class Colors:
    text: str = '#000000'
    bg: str = '#FFFFFF'
    homepage_bg: str = '#000000'
    header_bg: str = '#F0F0F0'
    header_border: str = '#CCCCCC'
    link: str = '#0000FF'
    link_visited: str = '#800080'
    link_hover: str = '#FF0000'
    header_text: str = '#000080'
    flame_text: str = '#FF3300'
    skeleton_bg: str = '#000000'
    flame_bg: str = '#000000'
    flame_border: str = '#FF3300'


@dataclass(frozen=True)
class Fonts:
    body: str = '"Times New Roman", Times, serif'
    monospace: str = '"Courier New", monospace'


@dataclass(frozen=True)
class FontSizes:
    body: str = '12pt'
    header_h1: str = 'clamp(14pt, 5vw, 48pt)'
    header_subtitle: str = 'clamp(8pt, 2.5vw, 24pt)'
    type_links: str = '18pt'
    type_section: str = '18pt'
    project_title: str = '20pt'
    project_card: str = '14pt'


@dataclass(frozen=True)
class Design:
    homepage_width: str = '66vw'
    homepage_padding: str = '30px'
    homepage_border: str = '4px outset #CCCCCC'
    homepage_bg: str = '#FFFFFF'
    skeleton_width: str = '150px'
    skeleton_padding: str = '10px'
    skeleton_border: str = '2px inset #666666'
    skeleton_gap: str = '20px'
    colors: Colors = field(default_factory=Colors)
    fonts: Fonts = field(default_factory=Fonts)
    font_size: FontSizes = field(default_factory=FontSizes)


@dataclass(frozen=True)
class NetworkSettings:
    timeout: float = 15.0   # seconds per thumbnail request
    workers: int = 4        # concurrent jobs within one project


@dataclass(frozen=True)
class SiteConfig:
    images: ImageSettings = field(default_factory=ImageSettings)
    homepage: HomepageSettings = field(default_factory=HomepageSettings)
    design: Design = field(default_factory=Design)
    network: NetworkSettings = field(default_factory=NetworkSettings)


# Nested sections, keyed by (owner class, field name)
_NESTED = {
    (SiteConfig, 'images'): ImageSettings,
    (SiteConfig, 'homepage'): HomepageSettings,
    (SiteConfig, 'design'): Design,
    (SiteConfig, 'network'): NetworkSettings,
    (Design, 'colors'): Colors,
    (Design, 'fonts'): Fonts,
    (Design, 'font_size'): FontSizes,
}


def _build_section(cls, data, path: str):
    """Build a (possibly nested) config section from a plain dict."""
    if not isinstance(data, dict):
        raise ConfigError(f"'{path or 'config'}' must be an object")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        prefix = f"{path}." if path else ""
        raise ConfigError(f"Unknown config keys: {', '.join(prefix + k for k in unknown)}")

    defaults = {f.name: f.default for f in fields(cls)}
    values = {}
    for key, value in data.items():
        nested = _NESTED.get((cls, key))
        key_path = f"{path}.{key}" if path else key
        if nested:
            values[key] = _build_section(nested, value, key_path)
        else:
            values[key] = _check_type(value, type(defaults[key]), key_path)
    return cls(**values)


def _check_type(value, expected: type, path: str):
    # bool is an int subclass but never a valid setting
    accepted = (int, float) if expected is float else expected
    if isinstance(value, bool) or not isinstance(value, accepted):
        raise ConfigError(f"{path} must be {expected.__name__}")
    return value


def config_from_dict(data: dict) -> SiteConfig:
    """Create a SiteConfig from a nested dict, defaults filling the gaps."""
    return _build_section(SiteConfig, data, '')


def config_to_dict(config: SiteConfig) -> dict:
    return asdict(config)


def load_config(config_path: Path = None) -> SiteConfig:
    """Load site configuration from a JSON file, or defaults if it is absent."""
    if config_path is None or not config_path.exists():
        return SiteConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    return config_from_dict(data)
