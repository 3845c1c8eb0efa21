"""Pydantic schemas used by the public API surface."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field, model_validator

from ..engine import derivations
from ..engine.derivations import (
    EnergyBreakdown,
    PredictionResult,
    ScreeningResult,
    SimulationResult,
)
from ..engine.usage import UsageCounters

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


class ErrorPayload(BaseModel):
    """Standard error envelope returned by API endpoints."""

    code: str = Field(..., description="Machine readable error identifier")
    message: str = Field(..., description="Human readable explanation")
    context: Dict[str, Any] = Field(default_factory=dict, description="Additional context")


class _RequestModel(BaseModel):
    """Base for request payloads; explicit ``null`` falls back to the field default."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


# ---------------------------------------------------------------------------
# Health and usage
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    uptime_secs: int = Field(..., ge=0)
    total_ops: int = Field(..., ge=0, description="Completed simulations, screenings and predictions")


class StatsResponse(BaseModel):
    """Process-wide usage counters since start-up."""

    total_simulations: int = Field(..., ge=0)
    total_screenings: int = Field(..., ge=0)
    total_predictions: int = Field(..., ge=0)
    molecules_analyzed: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, counters: UsageCounters) -> "StatsResponse":
        return cls(
            total_simulations=counters.total_simulations,
            total_screenings=counters.total_screenings,
            total_predictions=counters.total_predictions,
            molecules_analyzed=counters.molecules_analyzed,
        )


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------


class SimulateRequest(_RequestModel):
    molecule: str = Field(..., description="Molecule name, SMILES or any identifying text")
    simulation_type: str = Field(default=derivations.DEFAULT_SIMULATION_TYPE)
    steps: int = Field(default=derivations.DEFAULT_STEPS, ge=0, le=UINT64_MAX)
    temperature_k: float = Field(
        default=derivations.DEFAULT_TEMPERATURE_K,
        description="Accepted for forward compatibility; does not affect the result",
    )


class SimulateResponse(BaseModel):
    sim_id: str
    molecule: str
    simulation_type: str
    steps: int
    sdf_field_resolution: int
    energy_kcal_mol: float
    rmsd_angstrom: float
    folding_state: str
    elapsed_us: int

    @classmethod
    def from_domain(cls, result: SimulationResult, *, sim_id: str, elapsed_us: int) -> "SimulateResponse":
        return cls(
            sim_id=sim_id,
            molecule=result.molecule,
            simulation_type=result.simulation_type,
            steps=result.steps,
            sdf_field_resolution=result.field_resolution,
            energy_kcal_mol=result.energy_kcal_mol,
            rmsd_angstrom=result.rmsd_angstrom,
            folding_state=result.folding_state,
            elapsed_us=elapsed_us,
        )


# ---------------------------------------------------------------------------
# Virtual screening
# ---------------------------------------------------------------------------


class ScreenRequest(_RequestModel):
    target_protein: str
    library_size: int = Field(default=derivations.DEFAULT_LIBRARY_SIZE, ge=0, le=UINT32_MAX)
    binding_threshold: float = Field(
        default=derivations.DEFAULT_BINDING_THRESHOLD_NM,
        description="Affinity cut-off in nM; accepted but not applied to the hit list",
    )


class ScreenHit(BaseModel):
    compound_id: str
    binding_affinity_nm: float
    selectivity_score: float
    drug_likeness: float

    @classmethod
    def from_domain(cls, hit: derivations.ScreenHit) -> "ScreenHit":
        return cls(
            compound_id=hit.compound_id,
            binding_affinity_nm=hit.binding_affinity_nm,
            selectivity_score=hit.selectivity_score,
            drug_likeness=hit.drug_likeness,
        )


class ScreenResponse(BaseModel):
    screen_id: str
    target: str
    library_screened: int
    hits: List[ScreenHit] = Field(default_factory=list)
    hit_rate_pct: float
    elapsed_us: int

    @classmethod
    def from_domain(cls, result: ScreeningResult, *, screen_id: str, elapsed_us: int) -> "ScreenResponse":
        return cls(
            screen_id=screen_id,
            target=result.target,
            library_screened=result.library_screened,
            hits=[ScreenHit.from_domain(hit) for hit in result.hits],
            hit_rate_pct=result.hit_rate_pct,
            elapsed_us=elapsed_us,
        )


# ---------------------------------------------------------------------------
# Structure prediction
# ---------------------------------------------------------------------------


class PredictRequest(_RequestModel):
    sequence: str = Field(..., description="Amino-acid sequence in one-letter code")
    prediction_type: str = Field(default=derivations.DEFAULT_PREDICTION_TYPE)


class DomainInfo(BaseModel):
    name: str
    start: int
    end: int
    domain_type: str
    confidence: float

    @classmethod
    def from_domain(cls, domain: derivations.DomainInfo) -> "DomainInfo":
        return cls(
            name=domain.name,
            start=domain.start,
            end=domain.end,
            domain_type=domain.domain_type,
            confidence=domain.confidence,
        )


class PredictResponse(BaseModel):
    prediction_id: str
    sequence_length: int
    prediction_type: str
    structure_confidence: float
    sdf_representation_bytes: int
    secondary_structure: str
    domains: List[DomainInfo]
    elapsed_us: int

    @classmethod
    def from_domain(cls, result: PredictionResult, *, prediction_id: str, elapsed_us: int) -> "PredictResponse":
        return cls(
            prediction_id=prediction_id,
            sequence_length=result.sequence_length,
            prediction_type=result.prediction_type,
            structure_confidence=result.confidence,
            sdf_representation_bytes=result.representation_bytes,
            secondary_structure=result.secondary_structure,
            domains=[DomainInfo.from_domain(domain) for domain in result.domains],
            elapsed_us=elapsed_us,
        )


# ---------------------------------------------------------------------------
# Force-field energy
# ---------------------------------------------------------------------------


class EnergyRequest(_RequestModel):
    molecule: str
    force_field: str = Field(default=derivations.DEFAULT_FORCE_FIELD)


class EnergyResponse(BaseModel):
    molecule: str
    force_field: str
    total_energy_kcal: float
    bond_energy: float
    angle_energy: float
    dihedral_energy: float
    vdw_energy: float
    electrostatic_energy: float
    solvation_energy: float
    elapsed_us: int

    @classmethod
    def from_domain(cls, breakdown: EnergyBreakdown, *, elapsed_us: int) -> "EnergyResponse":
        return cls(
            molecule=breakdown.molecule,
            force_field=breakdown.force_field,
            total_energy_kcal=breakdown.total,
            bond_energy=breakdown.bond,
            angle_energy=breakdown.angle,
            dihedral_energy=breakdown.dihedral,
            vdw_energy=breakdown.vdw,
            electrostatic_energy=breakdown.electrostatic,
            solvation_energy=breakdown.solvation,
            elapsed_us=elapsed_us,
        )


# ---------------------------------------------------------------------------
# Capability catalogue
# ---------------------------------------------------------------------------


class Operation(str, Enum):
    SIMULATE = "simulate"
    SCREEN = "screen"
    PREDICT = "predict"
    ENERGY = "energy"


class OperationCapability(BaseModel):
    operation: Operation
    method: str = "POST"
    endpoint: str
    description: str
    payload_schema: Dict[str, Any]


class CapabilitiesResponse(BaseModel):
    operations: List[OperationCapability]


__all__ = [
    "CapabilitiesResponse",
    "DomainInfo",
    "EnergyRequest",
    "EnergyResponse",
    "ErrorPayload",
    "HealthResponse",
    "Operation",
    "OperationCapability",
    "PredictRequest",
    "PredictResponse",
    "ScreenHit",
    "ScreenRequest",
    "ScreenResponse",
    "SimulateRequest",
    "SimulateResponse",
    "StatsResponse",
]
