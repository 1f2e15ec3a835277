"""Per-station reduction and hazard classification."""

from .hazards import HAZARD_HEADER, HazardClassifier
from .models import Hazard, StationFacts
from .reducer import ObservationReducer

__all__ = [
    "HAZARD_HEADER",
    "Hazard",
    "HazardClassifier",
    "ObservationReducer",
    "StationFacts",
]
