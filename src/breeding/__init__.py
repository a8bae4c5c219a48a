"""Ladoum breeding engine.

Infers a ewe's current reproductive status from her breeding records and
forecasts her next heat or, when pregnant, her lambing date.  Pure
computation: every call takes the reference date explicitly and nothing
is cached or written back.

Core modules:
    base                — Canonical records, enums and prediction value objects
    config_loader       — Load/validate/hot-reload breeding_config.yaml
    cycle_length        — Personal heat-cycle length estimation
    status_classifier   — Reproductive status inference
    heat_predictor      — Next-heat forecast with surveillance window
    gestation_predictor — Lambing date forecast
    herd                — Flock-wide upcoming heat / lambing lists
    records             — Register document normalization
"""

from src.breeding.base import (
    Animal,
    AnimalStatus,
    Confidence,
    EventType,
    Gender,
    GestationPrediction,
    HeatPrediction,
    ReproductionRecord,
    ReproductiveStatus,
    UltrasoundResult,
)
from src.breeding.config_loader import BreedingConfig, get_breeding_config
from src.breeding.cycle_length import CycleLengthEstimator
from src.breeding.gestation_predictor import GestationPredictor
from src.breeding.heat_predictor import HeatPredictor
from src.breeding.herd import HerdAggregator
from src.breeding.status_classifier import StatusClassifier

__all__ = [
    "Animal",
    "AnimalStatus",
    "Confidence",
    "EventType",
    "Gender",
    "GestationPrediction",
    "HeatPrediction",
    "ReproductionRecord",
    "ReproductiveStatus",
    "UltrasoundResult",
    "BreedingConfig",
    "get_breeding_config",
    "CycleLengthEstimator",
    "StatusClassifier",
    "HeatPredictor",
    "GestationPredictor",
    "HerdAggregator",
]
