"""
bio_engine.engine
=================

Core computational primitives of the bio engine.  Everything numeric the
service reports is derived from a single 64-bit content hash of a designated
input field (:mod:`hashing`).  The four derivation functions in
:mod:`derivations` are pure, so identical inputs always produce identical
results, and they can be called directly without the FastAPI layer.  The only
shared mutable state is the :class:`~usage.UsageAggregator`, which counts
completed requests under a lock.
"""

from .derivations import (  # noqa: F401
    DomainInfo,
    EnergyBreakdown,
    PredictionResult,
    ScreenHit,
    ScreeningResult,
    SimulationResult,
    derive_energy,
    derive_prediction,
    derive_screening,
    derive_simulation,
)
from .hashing import fnv1a_64, hash_text  # noqa: F401
from .usage import UsageAggregator, UsageCounters, UsageKind  # noqa: F401

__all__ = [
    "DomainInfo",
    "EnergyBreakdown",
    "PredictionResult",
    "ScreenHit",
    "ScreeningResult",
    "SimulationResult",
    "UsageAggregator",
    "UsageCounters",
    "UsageKind",
    "derive_energy",
    "derive_prediction",
    "derive_screening",
    "derive_simulation",
    "fnv1a_64",
    "hash_text",
]
