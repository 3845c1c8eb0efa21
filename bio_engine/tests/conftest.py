import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from bio_engine.api.routes import ServiceRegistry
from bio_engine.engine import UsageAggregator


class StepClock:
    """Monotonic fake clock advancing by a fixed step on every read."""

    def __init__(self, step: float = 0.5) -> None:
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture()
def anyio_backend() -> str:  # pragma: no cover - restrict to asyncio for anyio plugin
    return "asyncio"


@pytest.fixture()
def registry() -> ServiceRegistry:
    """Fresh counters with pinned IDs and a deterministic clock."""

    issued = iter(range(1, 1_000_000))
    return ServiceRegistry(
        usage=UsageAggregator(),
        id_provider=lambda: f"id-{next(issued):04d}",
        clock=StepClock(),
        version="test-version",
    )
