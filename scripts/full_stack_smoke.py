"""End-to-end smoke test that exercises the public API routes."""

from __future__ import annotations

from pathlib import Path
import sys

from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bio_engine.main import app

PREFIX = "/api/v1/bio"


def main() -> None:
    with TestClient(app) as client:
        capabilities = client.get(f"{PREFIX}/capabilities")
        capabilities.raise_for_status()
        assert capabilities.json()["operations"], "Capabilities payload is empty"

        simulation = client.post(f"{PREFIX}/simulate", json={"molecule": "caffeine"})
        simulation.raise_for_status()
        data = simulation.json()
        assert data["sdf_field_resolution"] == 128, "Unexpected field resolution"
        assert data["folding_state"] in {"folded", "partially_folded"}

        screen = client.post(f"{PREFIX}/screen", json={"target_protein": "EGFR"})
        screen.raise_for_status()
        assert len(screen.json()["hits"]) == 20, "Default library should yield the capped hit list"

        prediction = client.post(f"{PREFIX}/predict", json={"sequence": "MKTAYIAKQRQISFVKSHFSRQ"})
        prediction.raise_for_status()
        assert len(prediction.json()["domains"]) == 2, "Prediction should report two domains"

        energy = client.post(f"{PREFIX}/energy", json={"molecule": "water"})
        energy.raise_for_status()
        breakdown = energy.json()
        terms = [value for key, value in breakdown.items() if key.endswith("_energy")]
        assert len(terms) == 6 and all(term < 0 for term in terms), "Energy terms must be negative"

        stats = client.get(f"{PREFIX}/stats")
        stats.raise_for_status()
        assert stats.json()["total_simulations"] >= 1

        health = client.get("/health")
        health.raise_for_status()
        assert health.json()["total_ops"] >= 3
        print("Smoke test passed")


if __name__ == "__main__":
    main()
