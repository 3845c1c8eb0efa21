from __future__ import annotations

import json

import pytest

from bio_engine import quickstart
from bio_engine.engine import hash_text
from bio_engine.engine.derivations import DEFAULT_FORCE_FIELD


def test_run_quickstart_returns_payload() -> None:
    payload = quickstart.run_quickstart("simulate", "caffeine", {"steps": "500"})
    assert payload["seed"] == hash_text("caffeine")
    assert payload["result"]["steps"] == 500
    assert payload["result"]["field_resolution"] == 128
    summary = quickstart.summarise_quickstart(payload)
    assert "molecular-dynamics over 500 steps" in summary


def test_energy_payload_includes_total() -> None:
    payload = quickstart.run_quickstart("energy", "water")
    result = payload["result"]
    terms = ("bond", "angle", "dihedral", "vdw", "electrostatic", "solvation")
    assert result["total"] == sum(result[term] for term in terms)
    assert "amber-ff14 total" in quickstart.summarise_quickstart(payload)


def test_run_quickstart_rejects_unknown_operation() -> None:
    with pytest.raises(quickstart.QuickstartError):
        quickstart.run_quickstart("dock", "caffeine")


def test_run_quickstart_rejects_invalid_options() -> None:
    with pytest.raises(quickstart.QuickstartError):
        quickstart.run_quickstart("screen", "EGFR", {"library_size": "lots"})
    with pytest.raises(quickstart.QuickstartError):
        quickstart.run_quickstart("screen", "EGFR", {"steps": "10"})
    with pytest.raises(quickstart.QuickstartError):
        quickstart.run_quickstart("simulate", "caffeine", {"steps": "-3"})


def test_available_presets_lists_expected_options() -> None:
    presets = quickstart.available_presets()
    assert {"caffeine", "egfr_screen", "ubiquitin", "water"} <= set(presets)
    assert {preset.operation for preset in presets.values()} == {"simulate", "screen", "predict", "energy"}


def test_main_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = quickstart.main(["--preset", "egfr_screen", "--option", "library_size=1000", "--json"])
    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["operation"] == "screen"
    assert len(payload["result"]["hits"]) == 5


def test_main_summary_for_prediction(capsys: pytest.CaptureFixture[str]) -> None:
    assert quickstart.main(["--preset", "ubiquitin"]) == 0
    output = capsys.readouterr().out
    assert "76 residues" in output
    assert "kinase_domain" in output


def test_energy_defaults_to_engine_force_field() -> None:
    payload = quickstart.run_quickstart("energy", "water")
    assert payload["result"]["force_field"] == DEFAULT_FORCE_FIELD
    custom = quickstart.run_quickstart("energy", "water", {"force_field": "charmm36"})
    assert custom["result"]["force_field"] == "charmm36"
