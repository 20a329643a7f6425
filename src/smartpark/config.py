# File: src/smartpark/config.py
"""
Engine configuration

Configuration is layered: built-in defaults, then an optional YAML file,
then SMARTPARK_* environment variables. Every layer produces a validated
EngineConfig; invalid values raise ValueError at load time.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Optional, Dict, Any, Mapping, Union
import logging
import os

import yaml

from .domain.pricing import PricingPolicy


ENV_PREFIX = "SMARTPARK_"
TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(value: Union[str, bool]) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value: {value}")


def _known_keys(cls, data: Mapping[str, Any], section: str) -> Dict[str, Any]:
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"Unknown {section} settings: {', '.join(sorted(unknown))}")
    return dict(data)


@dataclass(frozen=True)
class LayoutConfig:
    """Value Object: spaces created per floor by the default layout"""
    floors: int = 3
    car_spaces: int = 10
    handicapped_car_spaces: int = 2
    bike_spaces: int = 15
    truck_spaces: int = 5

    def __post_init__(self):
        if self.floors < 1:
            raise ValueError("Layout needs at least one floor")

        for name in ("car_spaces", "handicapped_car_spaces", "bike_spaces", "truck_spaces"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

        if self.handicapped_car_spaces > self.car_spaces:
            raise ValueError("Handicapped car spaces cannot exceed car spaces")

    @property
    def spaces_per_floor(self) -> int:
        return self.car_spaces + self.bike_spaces + self.truck_spaces

    @property
    def total_spaces(self) -> int:
        return self.floors * self.spaces_per_floor


@dataclass
class EngineConfig:
    """Settings for storage, snapshots, logging, pricing and layout"""
    database_url: str = "sqlite:///smartpark.db"
    snapshot_dir: str = "data"
    snapshot_enabled: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None
    currency: str = "INR"
    pricing: PricingPolicy = field(default_factory=PricingPolicy)
    layout: LayoutConfig = field(default_factory=LayoutConfig)

    def __post_init__(self):
        if not self.database_url:
            raise ValueError("Database URL cannot be empty")

        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Invalid log level: {self.log_level}")

        if len(self.currency) != 3:
            raise ValueError(f"Currency must be a 3-letter code, got: {self.currency}")

        self.snapshot_enabled = _parse_bool(self.snapshot_enabled)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'EngineConfig':
        data = dict(data or {})
        pricing = data.pop("pricing", None) or {}
        layout = data.pop("layout", None) or {}

        settings = _known_keys(cls, data, "engine")
        return cls(
            pricing=PricingPolicy(**_known_keys(PricingPolicy, pricing, "pricing")),
            layout=LayoutConfig(**_known_keys(LayoutConfig, layout, "layout")),
            **settings
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'EngineConfig':
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Configuration file {path} is not valid YAML: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_env(
        cls,
        base: Optional['EngineConfig'] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> 'EngineConfig':
        """Overlay SMARTPARK_* environment variables on `base` (defaults if omitted)"""
        environ = os.environ if environ is None else environ
        config = base or cls()

        overrides: Dict[str, Any] = {}
        for name in ("database_url", "snapshot_dir", "log_level", "log_file", "snapshot_enabled"):
            value = environ.get(ENV_PREFIX + name.upper())
            if value is not None and value != "":
                overrides[name] = value

        return replace(config, **overrides) if overrides else config

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> 'EngineConfig':
        """Defaults, then the YAML file if given, then the environment"""
        base = cls.from_yaml(path) if path else cls()
        return cls.from_env(base)
