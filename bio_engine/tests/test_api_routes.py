"""Integration tests for the FastAPI routes using httpx."""

from __future__ import annotations

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from bio_engine.api.routes import ServiceRegistry, get_services
from bio_engine.api import schemas
from bio_engine.engine import derivations, hash_text
from bio_engine.main import app

PREFIX = "/api/v1/bio"


@pytest.fixture()
async def test_client(registry: ServiceRegistry):
    app.dependency_overrides[get_services] = lambda: registry
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.mark.anyio("asyncio")
async def test_simulate_caffeine_uses_defaults(test_client: AsyncClient) -> None:
    response = await test_client.post(f"{PREFIX}/simulate", json={"molecule": "caffeine"})
    assert response.status_code == 200
    data = response.json()

    h = hash_text("caffeine")
    assert data["sim_id"] == "id-0001"
    assert data["molecule"] == "caffeine"
    assert data["simulation_type"] == "molecular-dynamics"
    assert data["steps"] == 10_000
    assert data["sdf_field_resolution"] == 128
    assert data["rmsd_angstrom"] >= 0.5
    assert data["rmsd_angstrom"] == pytest.approx((h % 30) * 0.1 + 0.5)
    assert data["energy_kcal_mol"] == -100.0 - (h % 500)
    assert data["folding_state"] == ("folded" if data["rmsd_angstrom"] < 2.0 else "partially_folded")
    assert data["elapsed_us"] == 500_000


@pytest.mark.anyio("asyncio")
async def test_simulate_null_fields_fall_back_to_defaults(test_client: AsyncClient) -> None:
    payload = {"molecule": "caffeine", "simulation_type": None, "steps": None, "temperature_k": None}
    response = await test_client.post(f"{PREFIX}/simulate", json=payload)
    assert response.status_code == 200
    data = response.json()
    assert data["steps"] == 10_000
    assert data["simulation_type"] == "molecular-dynamics"


@pytest.mark.anyio("asyncio")
async def test_screen_default_library_caps_hits(test_client: AsyncClient, registry: ServiceRegistry) -> None:
    response = await test_client.post(f"{PREFIX}/screen", json={"target_protein": "EGFR"})
    assert response.status_code == 200
    data = response.json()
    assert data["library_screened"] == 10_000
    assert len(data["hits"]) == 20
    assert data["hit_rate_pct"] == 0.5
    assert data["target"] == "EGFR"
    assert data["screen_id"] == "id-0001"
    assert set(data["hits"][0]) == {"compound_id", "binding_affinity_nm", "selectivity_score", "drug_likeness"}
    assert registry.usage.snapshot().molecules_analyzed == 10_000


@pytest.mark.anyio("asyncio")
async def test_screen_small_library_has_no_hits(test_client: AsyncClient) -> None:
    response = await test_client.post(
        f"{PREFIX}/screen", json={"target_protein": "EGFR", "library_size": 100, "binding_threshold": 5.0}
    )
    assert response.status_code == 200
    assert response.json()["hits"] == []


@pytest.mark.anyio("asyncio")
async def test_predict_reports_two_domains(test_client: AsyncClient) -> None:
    sequence = "MKTAYIAKQRQISFVKSHFSRQ"
    response = await test_client.post(f"{PREFIX}/predict", json={"sequence": sequence})
    assert response.status_code == 200
    data = response.json()

    assert data["prediction_type"] == "structure"
    assert data["sequence_length"] == len(sequence)
    assert data["sdf_representation_bytes"] == len(sequence) * 128
    assert data["secondary_structure"] == "HHHHCCCEEEEECCCHHHHH"
    first, second = data["domains"]
    assert first["name"] == "kinase_domain" and second["name"] == "binding_domain"
    assert first["end"] == second["start"] == len(sequence) // 3
    assert second["end"] == 2 * len(sequence) // 3
    assert first["confidence"] == pytest.approx(second["confidence"] + 0.05)
    assert 0.70 <= data["structure_confidence"] < 0.95


@pytest.mark.anyio("asyncio")
async def test_energy_for_water(test_client: AsyncClient) -> None:
    response = await test_client.post(f"{PREFIX}/energy", json={"molecule": "water", "force_field": "amber-ff14"})
    assert response.status_code == 200
    data = response.json()

    terms = [
        data["bond_energy"],
        data["angle_energy"],
        data["dihedral_energy"],
        data["vdw_energy"],
        data["electrostatic_energy"],
        data["solvation_energy"],
    ]
    assert all(term < 0 for term in terms)
    assert data["total_energy_kcal"] == pytest.approx(sum(terms))
    assert -150.0 < data["bond_energy"] <= -50.0
    assert -70.0 < data["angle_energy"] <= -20.0
    assert -40.0 < data["dihedral_energy"] <= -10.0
    assert -110.0 < data["vdw_energy"] <= -30.0
    assert -55.0 < data["electrostatic_energy"] <= -15.0
    assert -25.0 < data["solvation_energy"] <= -5.0
    assert data["force_field"] == "amber-ff14"
    assert "elapsed_us" in data


@pytest.mark.anyio("asyncio")
async def test_stats_and_health_track_completed_operations(test_client: AsyncClient) -> None:
    await test_client.post(f"{PREFIX}/simulate", json={"molecule": "caffeine"})
    await test_client.post(f"{PREFIX}/screen", json={"target_protein": "EGFR", "library_size": 2_000})
    await test_client.post(f"{PREFIX}/predict", json={"sequence": "ACDEFGHIK"})
    await test_client.post(f"{PREFIX}/energy", json={"molecule": "water"})

    stats = (await test_client.get(f"{PREFIX}/stats")).json()
    assert stats == {
        "total_simulations": 1,
        "total_screenings": 1,
        "total_predictions": 1,
        "molecules_analyzed": 1 + 2_000 + 1,
    }

    health = (await test_client.get("/health")).json()
    assert health["status"] == "ok"
    assert health["version"] == "test-version"
    assert health["total_ops"] == 3
    assert health["uptime_secs"] >= 0


@pytest.mark.anyio("asyncio")
async def test_invalid_payload_leaves_counters_untouched(
    test_client: AsyncClient, registry: ServiceRegistry
) -> None:
    bad_payloads = [
        (f"{PREFIX}/simulate", {}),
        (f"{PREFIX}/simulate", {"molecule": "caffeine", "steps": -1}),
        (f"{PREFIX}/screen", {"target_protein": "EGFR", "library_size": "many"}),
        (f"{PREFIX}/screen", {"target_protein": "EGFR", "library_size": 2**32}),
        (f"{PREFIX}/predict", {"sequence": 42}),
    ]
    for path, payload in bad_payloads:
        response = await test_client.post(path, json=payload)
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_payload"

    assert registry.usage.snapshot().molecules_analyzed == 0
    assert registry.usage.snapshot().total_ops == 0


@pytest.mark.anyio("asyncio")
async def test_empty_text_is_accepted(test_client: AsyncClient) -> None:
    response = await test_client.post(f"{PREFIX}/simulate", json={"molecule": ""})
    assert response.status_code == 200
    assert response.json()["energy_kcal_mol"] == -100.0 - (hash_text("") % 500)


@pytest.mark.anyio("asyncio")
async def test_concurrent_requests_are_all_counted(test_client: AsyncClient, registry: ServiceRegistry) -> None:
    simulations, screenings = 40, 25
    requests = [test_client.post(f"{PREFIX}/simulate", json={"molecule": f"m{index}"}) for index in range(simulations)]
    requests += [
        test_client.post(f"{PREFIX}/screen", json={"target_protein": f"t{index}", "library_size": 10})
        for index in range(screenings)
    ]
    responses = await asyncio.gather(*requests)
    assert all(response.status_code == 200 for response in responses)

    stats = (await test_client.get(f"{PREFIX}/stats")).json()
    assert stats["total_simulations"] == simulations
    assert stats["total_screenings"] == screenings
    assert stats["molecules_analyzed"] == simulations + screenings * 10


@pytest.mark.anyio("asyncio")
async def test_capabilities_lists_operations(test_client: AsyncClient) -> None:
    response = await test_client.get(f"{PREFIX}/capabilities")
    assert response.status_code == 200
    operations = {item["operation"]: item for item in response.json()["operations"]}
    assert set(operations) == {"simulate", "screen", "predict", "energy"}
    assert operations["screen"]["endpoint"] == f"{PREFIX}/screen"
    assert "target_protein" in operations["screen"]["payload_schema"]["properties"]


def test_prediction_response_converts_engine_domains() -> None:
    result = derivations.derive_prediction("MKTAYIAKQRQISFVKSHFSRQ")
    response = schemas.PredictResponse.from_domain(result, prediction_id="id-0001", elapsed_us=5)

    assert all(isinstance(domain, schemas.DomainInfo) for domain in response.domains)
    assert [domain.name for domain in response.domains] == ["kinase_domain", "binding_domain"]
    assert response.domains[0].end == result.domains[0].end
    hit = derivations.derive_screening("EGFR", library_size=200).hits[0]
    assert schemas.ScreenHit.from_domain(hit).compound_id == hit.compound_id
