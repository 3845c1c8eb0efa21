"""FastAPI router wiring the derivation engine and usage counters."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Type

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from .. import __version__
from ..config import DEFAULT_API_PREFIX
from ..engine import (
    UsageAggregator,
    derive_energy,
    derive_prediction,
    derive_screening,
    derive_simulation,
    hash_text,
)
from . import schemas


def _uuid4_provider() -> str:
    return str(uuid.uuid4())


@dataclass
class ServiceRegistry:
    """Container bundling the shared state and capabilities used by the API.

    ``id_provider`` and ``clock`` are injected so tests can pin opaque IDs and
    elapsed times.  ``clock`` must be monotonic and return seconds.
    """

    usage: UsageAggregator = field(default_factory=UsageAggregator)
    id_provider: Callable[[], str] = _uuid4_provider
    clock: Callable[[], float] = time.perf_counter
    version: str = __version__
    api_prefix: str = DEFAULT_API_PREFIX
    started_at: float = field(init=False)

    def __post_init__(self) -> None:
        self.started_at = self.clock()

    def configure(
        self,
        *,
        usage: UsageAggregator | None = None,
        id_provider: Callable[[], str] | None = None,
        clock: Callable[[], float] | None = None,
        version: str | None = None,
        api_prefix: str | None = None,
    ) -> None:
        if usage is not None:
            self.usage = usage
        if id_provider is not None:
            self.id_provider = id_provider
        if clock is not None:
            self.clock = clock
            self.started_at = clock()
        if version is not None:
            self.version = version
        if api_prefix is not None:
            self.api_prefix = api_prefix

    def uptime_secs(self) -> int:
        return max(0, int(self.clock() - self.started_at))

    def elapsed_us(self, started: float) -> int:
        return max(0, int((self.clock() - started) * 1_000_000))


services = ServiceRegistry()


def configure_services(
    *,
    usage: UsageAggregator | None = None,
    id_provider: Callable[[], str] | None = None,
    clock: Callable[[], float] | None = None,
    version: str | None = None,
    api_prefix: str | None = None,
) -> None:
    """Configure the shared service registry used by API routes."""

    services.configure(
        usage=usage,
        id_provider=id_provider,
        clock=clock,
        version=version,
        api_prefix=api_prefix,
    )


def get_services(request: Request) -> ServiceRegistry:
    """Return the registry bound to the serving app, or the shared default."""

    return getattr(request.app.state, "services", services)


router = APIRouter()


@router.post("/simulate", response_model=schemas.SimulateResponse)
def run_simulation(
    request: schemas.SimulateRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.SimulateResponse:
    started = svc.clock()
    result = derive_simulation(
        request.molecule,
        hash_text(request.molecule),
        simulation_type=request.simulation_type,
        steps=request.steps,
        temperature_k=request.temperature_k,
    )
    svc.usage.record_simulation()
    return schemas.SimulateResponse.from_domain(
        result,
        sim_id=svc.id_provider(),
        elapsed_us=svc.elapsed_us(started),
    )


@router.post("/screen", response_model=schemas.ScreenResponse)
def run_screening(
    request: schemas.ScreenRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.ScreenResponse:
    started = svc.clock()
    result = derive_screening(
        request.target_protein,
        hash_text(request.target_protein),
        library_size=request.library_size,
        binding_threshold=request.binding_threshold,
    )
    svc.usage.record_screening(result.library_screened)
    return schemas.ScreenResponse.from_domain(
        result,
        screen_id=svc.id_provider(),
        elapsed_us=svc.elapsed_us(started),
    )


@router.post("/predict", response_model=schemas.PredictResponse)
def run_prediction(
    request: schemas.PredictRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.PredictResponse:
    started = svc.clock()
    result = derive_prediction(
        request.sequence,
        hash_text(request.sequence),
        prediction_type=request.prediction_type,
    )
    svc.usage.record_prediction()
    return schemas.PredictResponse.from_domain(
        result,
        prediction_id=svc.id_provider(),
        elapsed_us=svc.elapsed_us(started),
    )


@router.post("/energy", response_model=schemas.EnergyResponse)
def compute_energy(
    request: schemas.EnergyRequest,
    svc: ServiceRegistry = Depends(get_services),
) -> schemas.EnergyResponse:
    started = svc.clock()
    breakdown = derive_energy(
        request.molecule,
        hash_text(request.molecule),
        force_field=request.force_field,
    )
    svc.usage.record_energy()
    return schemas.EnergyResponse.from_domain(breakdown, elapsed_us=svc.elapsed_us(started))


@router.get("/stats", response_model=schemas.StatsResponse)
def usage_stats(svc: ServiceRegistry = Depends(get_services)) -> schemas.StatsResponse:
    return schemas.StatsResponse.from_domain(svc.usage.snapshot())


@dataclass(frozen=True)
class OperationConfig:
    """Metadata describing how catalogue entries map to endpoints."""

    request_model: Type[BaseModel]
    path: str
    description: str


OPERATIONS: Dict[schemas.Operation, OperationConfig] = {
    schemas.Operation.SIMULATE: OperationConfig(
        request_model=schemas.SimulateRequest,
        path="/simulate",
        description="Run a synthetic molecular simulation and report energy, RMSD and folding state.",
    ),
    schemas.Operation.SCREEN: OperationConfig(
        request_model=schemas.ScreenRequest,
        path="/screen",
        description="Virtually screen a compound library against a target protein.",
    ),
    schemas.Operation.PREDICT: OperationConfig(
        request_model=schemas.PredictRequest,
        path="/predict",
        description="Predict structure confidence and domain layout for an amino-acid sequence.",
    ),
    schemas.Operation.ENERGY: OperationConfig(
        request_model=schemas.EnergyRequest,
        path="/energy",
        description="Break a molecule's force-field energy into its six terms.",
    ),
}


@router.get("/capabilities", response_model=schemas.CapabilitiesResponse)
def capabilities(svc: ServiceRegistry = Depends(get_services)) -> schemas.CapabilitiesResponse:
    """Expose the operation catalogue so clients can self-discover payloads."""

    operations = [
        schemas.OperationCapability(
            operation=operation,
            endpoint=f"{svc.api_prefix}{config.path}",
            description=config.description,
            payload_schema=config.request_model.model_json_schema(),
        )
        for operation, config in OPERATIONS.items()
    ]
    return schemas.CapabilitiesResponse(operations=operations)


__all__ = [
    "OPERATIONS",
    "ServiceRegistry",
    "configure_services",
    "get_services",
    "router",
    "services",
]
