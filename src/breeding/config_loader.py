"""Load, validate, and hot-reload the breeding engine calibration.

The config lives in ``breeding_config.yaml`` alongside this module.  At
startup it is loaded once and cached.  Point ``LADOUM_BREEDING_CONFIG_PATH``
at another file to calibrate for a different breed, and call
``reload_breeding_config()`` to re-read it without a restart.

Usage::

    from src.breeding.config_loader import get_breeding_config

    config = get_breeding_config()
    config.gestation.period_days          # 150
    config.gestation.active_window_days   # 165
    config.heat_cycle.default_length_days # 17
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.config import get_settings

logger = logging.getLogger("ladoum.breeding.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "breeding_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeatCycleConfig:
    """Estrus cycle estimation and heat forecasting settings.

    Attributes:
        default_length_days:        Cycle length used without enough history.
        min_plausible_days:         Shortest heat-to-heat interval kept.
        max_plausible_days:         Longest heat-to-heat interval kept.
        min_valid_intervals:        Plausible intervals needed before the
                                    personal average replaces the default.
        in_heat_days:               A heat recorded this many days ago or
                                    less means the animal is still in heat.
        surveillance_window_days:   Half-width of the heat watch window.
        no_history_offset_days:     Placeholder offset when no heat is known.
        lactation_extension_factor: Cycle multiplier while nursing.
    """

    default_length_days: int = 17
    min_plausible_days: int = 12
    max_plausible_days: int = 25
    min_valid_intervals: int = 1
    in_heat_days: int = 2
    surveillance_window_days: int = 2
    no_history_offset_days: int = 7
    lactation_extension_factor: float = 1.2


@dataclass(frozen=True)
class GestationConfig:
    """Pregnancy and birth forecasting settings."""

    period_days: int = 150
    overdue_tolerance_days: int = 15
    surveillance_window_days: int = 5
    early_pregnancy_days: int = 45

    @property
    def active_window_days(self) -> int:
        """Days after a mating during which the pregnancy is still tracked."""
        return self.period_days + self.overdue_tolerance_days


@dataclass(frozen=True)
class PostPartumConfig:
    """Recovery periods after birth or abortion."""

    delay_days: int = 45
    lactation_days: int = 90
    abortion_rest_days: int = 30


@dataclass(frozen=True)
class ConfidenceConfig:
    """Heat-count thresholds for the confidence tiers."""

    medium_min_heats: int = 2
    high_min_heats: int = 5


@dataclass(frozen=True)
class HerdConfig:
    """Default horizons for the herd-wide upcoming lists."""

    upcoming_heats_horizon_days: int = 7
    upcoming_births_horizon_days: int = 14


@dataclass(frozen=True)
class BreedingConfig:
    """Complete, validated breeding engine configuration.

    This is the single in-memory representation of breeding_config.yaml.
    Every predictor takes one explicitly; tests build their own with
    ``dataclasses.replace`` on the section they need to change.

    Attributes:
        version:     Config schema version string.
        species:     Species the calibration applies to.
        heat_cycle:  Cycle length and heat forecasting settings.
        gestation:   Pregnancy tracking settings.
        post_partum: Recovery periods.
        confidence:  Confidence tier thresholds.
        herd:        Herd-wide query defaults.
    """

    version: str = "1.0"
    species: str = "sheep"
    heat_cycle: HeatCycleConfig = field(default_factory=HeatCycleConfig)
    gestation: GestationConfig = field(default_factory=GestationConfig)
    post_partum: PostPartumConfig = field(default_factory=PostPartumConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    herd: HerdConfig = field(default_factory=HerdConfig)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when breeding_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Breeding config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigValidationError(f"{path} must contain a mapping at the top level")
    return raw


def _validate_and_build(raw: dict) -> BreedingConfig:
    """Validate the raw YAML dict and construct a BreedingConfig.

    Missing keys fall back to the dataclass defaults.  Every problem is
    collected before raising so an admin sees the whole list at once.

    Args:
        raw: Parsed YAML dict.

    Returns:
        Validated BreedingConfig instance.

    Raises:
        ConfigValidationError: If any value is missing a valid type or range.
    """
    errors: list[str] = []

    def _section(name: str) -> dict:
        value = raw.get(name) or {}
        if not isinstance(value, dict):
            errors.append(f"'{name}' must be a mapping")
            return {}
        return value

    def _int(section: dict, name: str, key: str, default: int, minimum: int = 1) -> int:
        value = section.get(key, default)
        if (
            isinstance(value, bool)
            or not isinstance(value, (int, float))
            or (isinstance(value, float) and not math.isfinite(value))
            or value != int(value)
        ):
            errors.append(f"{name}.{key} must be a whole number, got {value!r}")
            return default
        if value < minimum:
            errors.append(f"{name}.{key} = {value} must be >= {minimum}")
        return int(value)

    def _float(section: dict, name: str, key: str, default: float, minimum: float) -> float:
        value = section.get(key, default)
        try:
            f = float(value)
        except (TypeError, ValueError):
            errors.append(f"{name}.{key} must be a number, got {value!r}")
            return default
        if not math.isfinite(f):
            errors.append(f"{name}.{key} must be finite, got {value!r}")
            return default
        if f < minimum:
            errors.append(f"{name}.{key} = {f} must be >= {minimum}")
        return f

    version = str(raw.get("version", "1.0"))
    species = str(raw.get("species", "sheep"))

    # ── Heat cycle ──
    hc_raw = _section("heat_cycle")
    hc_defaults = HeatCycleConfig()
    heat_cycle = HeatCycleConfig(
        default_length_days=_int(hc_raw, "heat_cycle", "default_length_days", hc_defaults.default_length_days),
        min_plausible_days=_int(hc_raw, "heat_cycle", "min_plausible_days", hc_defaults.min_plausible_days),
        max_plausible_days=_int(hc_raw, "heat_cycle", "max_plausible_days", hc_defaults.max_plausible_days),
        min_valid_intervals=_int(hc_raw, "heat_cycle", "min_valid_intervals", hc_defaults.min_valid_intervals),
        in_heat_days=_int(hc_raw, "heat_cycle", "in_heat_days", hc_defaults.in_heat_days, minimum=0),
        surveillance_window_days=_int(
            hc_raw, "heat_cycle", "surveillance_window_days", hc_defaults.surveillance_window_days, minimum=0
        ),
        no_history_offset_days=_int(
            hc_raw, "heat_cycle", "no_history_offset_days", hc_defaults.no_history_offset_days
        ),
        lactation_extension_factor=_float(
            hc_raw, "heat_cycle", "lactation_extension_factor", hc_defaults.lactation_extension_factor, 1.0
        ),
    )
    if heat_cycle.min_plausible_days > heat_cycle.max_plausible_days:
        errors.append(
            f"heat_cycle.min_plausible_days ({heat_cycle.min_plausible_days}) exceeds "
            f"max_plausible_days ({heat_cycle.max_plausible_days})"
        )
    elif not (
        heat_cycle.min_plausible_days
        <= heat_cycle.default_length_days
        <= heat_cycle.max_plausible_days
    ):
        logger.warning(
            "Default cycle length %d lies outside the plausible range [%d, %d]",
            heat_cycle.default_length_days,
            heat_cycle.min_plausible_days,
            heat_cycle.max_plausible_days,
        )

    # ── Gestation ──
    g_raw = _section("gestation")
    g_defaults = GestationConfig()
    gestation = GestationConfig(
        period_days=_int(g_raw, "gestation", "period_days", g_defaults.period_days),
        overdue_tolerance_days=_int(
            g_raw, "gestation", "overdue_tolerance_days", g_defaults.overdue_tolerance_days, minimum=0
        ),
        surveillance_window_days=_int(
            g_raw, "gestation", "surveillance_window_days", g_defaults.surveillance_window_days, minimum=0
        ),
        early_pregnancy_days=_int(
            g_raw, "gestation", "early_pregnancy_days", g_defaults.early_pregnancy_days, minimum=0
        ),
    )

    # ── Post-partum ──
    pp_raw = _section("post_partum")
    pp_defaults = PostPartumConfig()
    post_partum = PostPartumConfig(
        delay_days=_int(pp_raw, "post_partum", "delay_days", pp_defaults.delay_days, minimum=0),
        lactation_days=_int(pp_raw, "post_partum", "lactation_days", pp_defaults.lactation_days, minimum=0),
        abortion_rest_days=_int(
            pp_raw, "post_partum", "abortion_rest_days", pp_defaults.abortion_rest_days, minimum=0
        ),
    )

    # ── Confidence ──
    c_raw = _section("confidence")
    c_defaults = ConfidenceConfig()
    confidence = ConfidenceConfig(
        medium_min_heats=_int(c_raw, "confidence", "medium_min_heats", c_defaults.medium_min_heats),
        high_min_heats=_int(c_raw, "confidence", "high_min_heats", c_defaults.high_min_heats),
    )
    if confidence.medium_min_heats > confidence.high_min_heats:
        errors.append(
            f"confidence.medium_min_heats ({confidence.medium_min_heats}) exceeds "
            f"high_min_heats ({confidence.high_min_heats})"
        )

    # ── Herd ──
    h_raw = _section("herd")
    h_defaults = HerdConfig()
    herd = HerdConfig(
        upcoming_heats_horizon_days=_int(
            h_raw, "herd", "upcoming_heats_horizon_days", h_defaults.upcoming_heats_horizon_days, minimum=0
        ),
        upcoming_births_horizon_days=_int(
            h_raw, "herd", "upcoming_births_horizon_days", h_defaults.upcoming_births_horizon_days, minimum=0
        ),
    )

    if errors:
        raise ConfigValidationError(
            f"breeding_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return BreedingConfig(
        version=version,
        species=species,
        heat_cycle=heat_cycle,
        gestation=gestation,
        post_partum=post_partum,
        confidence=confidence,
        herd=herd,
    )


def load_breeding_config(path: Path | None = None) -> BreedingConfig:
    """Load and validate the breeding config from disk.

    Args:
        path: Override path to YAML.  Falls back to the
              ``LADOUM_BREEDING_CONFIG_PATH`` setting, then to the bundled
              breeding_config.yaml.

    Returns:
        Validated BreedingConfig instance.
    """
    target = path or get_settings().breeding_config_path or _CONFIG_PATH
    raw = _load_yaml(Path(target))
    config = _validate_and_build(raw)
    logger.info("Loaded breeding config v%s (%s) from %s", config.version, config.species, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: BreedingConfig | None = None
_config_lock = threading.Lock()


def get_breeding_config() -> BreedingConfig:
    """Return the global BreedingConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_breeding_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_breeding_config()
    return _config


def reload_breeding_config(path: Path | None = None) -> BreedingConfig:
    """Reload the breeding config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Args:
        path: Override path to YAML.

    Returns:
        The newly loaded BreedingConfig.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_breeding_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded breeding config: %s → %s", old_version, new_config.version)
    return new_config
