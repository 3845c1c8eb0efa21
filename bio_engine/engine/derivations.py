"""Deterministic synthetic derivations behind the bio engine routes.

Every function in this module is a pure mapping from request parameters and a
64-bit content hash to a structured result.  None of them touch shared state
or perform I/O, so they can be exercised directly in tests without the HTTP
layer.  The numbers are *synthetic*: they are reproducible for a given input
text but carry no physical meaning.

Additions to the seed wrap at 64 bits, matching unsigned arithmetic for
seeds close to ``2**64``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .hashing import MASK_64, hash_text

LOGGER = logging.getLogger(__name__)


DEFAULT_SIMULATION_TYPE = "molecular-dynamics"
DEFAULT_STEPS = 10_000
DEFAULT_TEMPERATURE_K = 310.15  # body temperature
FIELD_RESOLUTION = 128

DEFAULT_LIBRARY_SIZE = 10_000
DEFAULT_BINDING_THRESHOLD_NM = 100.0
HIT_RATE = 0.005
HIT_RATE_PCT = 0.5
MAX_HITS = 20
COMPOUND_PREFIX = "ALICE"

DEFAULT_PREDICTION_TYPE = "structure"
REPRESENTATION_BYTES_PER_RESIDUE = 128
SECONDARY_STRUCTURE_PLACEHOLDER = "HHHHCCCEEEEECCCHHHHH"

DEFAULT_FORCE_FIELD = "amber-ff14"
# (base, range) per force-field term; each term is ``base - (seed % range)``.
ENERGY_TERMS: Tuple[Tuple[str, float, int], ...] = (
    ("bond", -50.0, 100),
    ("angle", -20.0, 50),
    ("dihedral", -10.0, 30),
    ("vdw", -30.0, 80),
    ("electrostatic", -15.0, 40),
    ("solvation", -5.0, 20),
)


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Outcome of a synthetic molecular simulation."""

    molecule: str
    simulation_type: str
    steps: int
    field_resolution: int
    energy_kcal_mol: float
    rmsd_angstrom: float
    folding_state: str


@dataclass(frozen=True, slots=True)
class ScreenHit:
    compound_id: str
    binding_affinity_nm: float
    selectivity_score: float
    drug_likeness: float


@dataclass(frozen=True, slots=True)
class ScreeningResult:
    """Hits returned by a virtual screen of a compound library."""

    target: str
    library_screened: int
    hits: Tuple[ScreenHit, ...]
    hit_rate_pct: float


@dataclass(frozen=True, slots=True)
class DomainInfo:
    name: str
    start: int
    end: int
    domain_type: str
    confidence: float


@dataclass(frozen=True, slots=True)
class PredictionResult:
    """Structure prediction for an amino-acid sequence."""

    sequence_length: int
    prediction_type: str
    confidence: float
    representation_bytes: int
    secondary_structure: str
    domains: Tuple[DomainInfo, ...]


@dataclass(frozen=True, slots=True)
class EnergyBreakdown:
    """Force-field energy decomposition; ``total`` is the exact sum of the terms."""

    molecule: str
    force_field: str
    bond: float
    angle: float
    dihedral: float
    vdw: float
    electrostatic: float
    solvation: float

    @property
    def total(self) -> float:
        return self.bond + self.angle + self.dihedral + self.vdw + self.electrostatic + self.solvation


def _offset(seed: int, delta: int) -> int:
    return (seed + delta) & MASK_64


def folding_state_for(rmsd: float) -> str:
    return "folded" if rmsd < 2.0 else "partially_folded"


def derive_simulation(
    molecule: str,
    seed: int | None = None,
    *,
    simulation_type: str = DEFAULT_SIMULATION_TYPE,
    steps: int = DEFAULT_STEPS,
    temperature_k: float = DEFAULT_TEMPERATURE_K,
) -> SimulationResult:
    """Derive simulation energy and RMSD from the molecule hash.

    ``temperature_k`` is accepted for forward compatibility but does not
    influence the current derivation.
    """

    h = hash_text(molecule) if seed is None else seed
    energy = -100.0 - float(h % 500)
    rmsd = float(h % 30) * 0.1 + 0.5
    LOGGER.debug("Simulation seed=%d energy=%.1f rmsd=%.2f temperature_k=%.2f", h, energy, rmsd, temperature_k)
    return SimulationResult(
        molecule=molecule,
        simulation_type=simulation_type,
        steps=steps,
        field_resolution=FIELD_RESOLUTION,
        energy_kcal_mol=energy,
        rmsd_angstrom=rmsd,
        folding_state=folding_state_for(rmsd),
    )


def hit_count_for(library_size: int) -> int:
    """Number of hits reported for a library (0.5% hit rate, capped)."""

    return min(MAX_HITS, max(0, int(library_size * HIT_RATE)))


def derive_screening(
    target: str,
    seed: int | None = None,
    *,
    library_size: int = DEFAULT_LIBRARY_SIZE,
    binding_threshold: float = DEFAULT_BINDING_THRESHOLD_NM,
) -> ScreeningResult:
    """Derive the hit list for a virtual screen against ``target``.

    ``binding_threshold`` is currently not used to filter hits.
    """

    h = hash_text(target) if seed is None else seed
    hits = []
    for index in range(hit_count_for(library_size)):
        shifted = _offset(h, index)
        hits.append(
            ScreenHit(
                compound_id=f"{COMPOUND_PREFIX}-{shifted % 999_999:06d}",
                binding_affinity_nm=float(shifted % 100) + 1.0,
                selectivity_score=0.7 + float(shifted % 30) * 0.01,
                drug_likeness=0.5 + float(_offset(h, index * 7) % 50) * 0.01,
            )
        )
    LOGGER.debug(
        "Screening seed=%d library=%d hits=%d threshold=%.1f", h, library_size, len(hits), binding_threshold
    )
    return ScreeningResult(
        target=target,
        library_screened=library_size,
        hits=tuple(hits),
        hit_rate_pct=HIT_RATE_PCT,
    )


def derive_prediction(
    sequence: str,
    seed: int | None = None,
    *,
    prediction_type: str = DEFAULT_PREDICTION_TYPE,
) -> PredictionResult:
    """Derive a structure prediction with two fixed domains.

    The sequence length is measured in UTF-8 bytes.  The secondary structure
    is a placeholder that does not depend on the sequence.
    """

    length = len(sequence.encode("utf-8"))
    h = hash_text(sequence) if seed is None else seed
    confidence = 0.70 + float(h % 25) * 0.01
    domains = (
        DomainInfo(
            name="kinase_domain",
            start=0,
            end=length // 3,
            domain_type="catalytic",
            confidence=confidence + 0.05,
        ),
        DomainInfo(
            name="binding_domain",
            start=length // 3,
            end=length * 2 // 3,
            domain_type="regulatory",
            confidence=confidence,
        ),
    )
    return PredictionResult(
        sequence_length=length,
        prediction_type=prediction_type,
        confidence=confidence,
        representation_bytes=length * REPRESENTATION_BYTES_PER_RESIDUE,
        secondary_structure=SECONDARY_STRUCTURE_PLACEHOLDER,
        domains=domains,
    )


def derive_energy(
    molecule: str,
    seed: int | None = None,
    *,
    force_field: str = DEFAULT_FORCE_FIELD,
) -> EnergyBreakdown:
    """Derive the six force-field terms for ``molecule``."""

    h = hash_text(molecule) if seed is None else seed
    terms = {name: base - float(h % span) for name, base, span in ENERGY_TERMS}
    return EnergyBreakdown(molecule=molecule, force_field=force_field, **terms)


__all__ = [
    "COMPOUND_PREFIX",
    "DEFAULT_BINDING_THRESHOLD_NM",
    "DEFAULT_FORCE_FIELD",
    "DEFAULT_LIBRARY_SIZE",
    "DEFAULT_PREDICTION_TYPE",
    "DEFAULT_SIMULATION_TYPE",
    "DEFAULT_STEPS",
    "DEFAULT_TEMPERATURE_K",
    "DomainInfo",
    "ENERGY_TERMS",
    "EnergyBreakdown",
    "FIELD_RESOLUTION",
    "HIT_RATE_PCT",
    "MAX_HITS",
    "PredictionResult",
    "ScreenHit",
    "ScreeningResult",
    "SimulationResult",
    "derive_energy",
    "derive_prediction",
    "derive_screening",
    "derive_simulation",
    "folding_state_for",
    "hit_count_for",
]
