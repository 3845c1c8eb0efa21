"""Command-line helper for exploring the bio engine derivations locally."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Mapping, Sequence

from .engine import (
    derive_energy,
    derive_prediction,
    derive_screening,
    derive_simulation,
    hash_text,
)
from .engine.derivations import DEFAULT_FORCE_FIELD, EnergyBreakdown


@dataclass(frozen=True)
class Preset:
    """Describe a ready-made input for the quickstart CLI."""

    operation: str
    text: str
    description: str


_PRESETS: Dict[str, Preset] = {
    "caffeine": Preset(
        operation="simulate",
        text="caffeine",
        description="Molecular-dynamics run on caffeine with the default 10k steps.",
    ),
    "egfr_screen": Preset(
        operation="screen",
        text="EGFR",
        description="Screen the default 10k compound library against EGFR.",
    ),
    "ubiquitin": Preset(
        operation="predict",
        text="MQIFVKTLTGKTITLEVEPSDTIENVKAKIQDKEGIPPDQQRLIFAGKQLEDGRTLSDYNIQKESTLHLVLRLRGG",
        description="Structure prediction for human ubiquitin (76 residues).",
    ),
    "water": Preset(
        operation="energy",
        text="water",
        description="AMBER ff14 energy breakdown for a water molecule.",
    ),
}

_OPERATIONS = ("simulate", "screen", "predict", "energy")


class QuickstartError(Exception):
    """Raised when the quickstart helper receives invalid input."""


def available_presets() -> Mapping[str, Preset]:
    """Return the preset inputs shipped with the CLI."""

    return dict(_PRESETS)


def _parse_options(values: Iterable[str]) -> Dict[str, str]:
    options: Dict[str, str] = {}
    for value in values:
        key, sep, raw = value.partition("=")
        if not sep or not key.strip():
            raise QuickstartError("Options must use the format KEY=VALUE (for example steps=5000)")
        options[key.strip().replace("-", "_")] = raw.strip()
    return options


def _coerce(options: Mapping[str, object], key: str, kind: type) -> Dict[str, object]:
    if key not in options:
        return {}
    raw = options[key]
    try:
        value = kind(raw)
    except (TypeError, ValueError) as exc:
        raise QuickstartError(f"Option '{key}' has an invalid value: {raw!r}") from exc
    if kind is int and value < 0:
        raise QuickstartError(f"Option '{key}' must be non-negative")
    return {key: value}


def run_quickstart(
    operation: str,
    text: str,
    options: Mapping[str, object] | None = None,
) -> Dict[str, object]:
    """Run one derivation locally and return a JSON-ready payload."""

    options = dict(options or {})
    known = {
        "simulate": {"simulation_type", "steps", "temperature_k"},
        "screen": {"library_size", "binding_threshold"},
        "predict": {"prediction_type"},
        "energy": {"force_field"},
    }
    if operation not in known:
        raise QuickstartError(f"Operation must be one of {list(_OPERATIONS)} (received {operation!r})")
    unknown = sorted(set(options) - known[operation])
    if unknown:
        raise QuickstartError(f"Unsupported options for '{operation}': {', '.join(unknown)}")

    seed = hash_text(text)
    if operation == "simulate":
        kwargs: Dict[str, object] = {}
        if "simulation_type" in options:
            kwargs["simulation_type"] = str(options["simulation_type"])
        kwargs.update(_coerce(options, "steps", int))
        kwargs.update(_coerce(options, "temperature_k", float))
        result: object = derive_simulation(text, seed, **kwargs)
    elif operation == "screen":
        kwargs = {}
        kwargs.update(_coerce(options, "library_size", int))
        kwargs.update(_coerce(options, "binding_threshold", float))
        result = derive_screening(text, seed, **kwargs)
    elif operation == "predict":
        kwargs = {}
        if "prediction_type" in options:
            kwargs["prediction_type"] = str(options["prediction_type"])
        result = derive_prediction(text, seed, **kwargs)
    else:
        result = derive_energy(text, seed, force_field=str(options.get("force_field", DEFAULT_FORCE_FIELD)))

    data = asdict(result)  # type: ignore[call-overload]
    if isinstance(result, EnergyBreakdown):
        data["total"] = result.total
    return {"operation": operation, "input": text, "seed": seed, "result": data}


def summarise_quickstart(payload: Mapping[str, object]) -> str:
    """Create a human-readable summary of a quickstart run."""

    operation = payload.get("operation")
    result = payload.get("result", {})
    if not isinstance(result, Mapping):
        return "No result data available"
    lines = [f"{operation} for {payload.get('input')!r} (seed {payload.get('seed')}):"]

    if operation == "simulate":
        lines.append(
            f"  • {result['simulation_type']} over {result['steps']} steps: "
            f"energy {result['energy_kcal_mol']:.1f} kcal/mol, RMSD {result['rmsd_angstrom']:.2f} Å "
            f"({result['folding_state']})"
        )
    elif operation == "screen":
        hits = result.get("hits", [])
        lines.append(f"  • {len(hits)} hits from {result['library_screened']} compounds")
        for hit in hits[:5]:
            lines.append(
                f"     {hit['compound_id']}: {hit['binding_affinity_nm']:.0f} nM, "
                f"selectivity {hit['selectivity_score']:.2f}, drug-likeness {hit['drug_likeness']:.2f}"
            )
        if len(hits) > 5:
            lines.append(f"     … {len(hits) - 5} more")
    elif operation == "predict":
        lines.append(
            f"  • {result['sequence_length']} residues, confidence {result['confidence']:.2f}, "
            f"secondary structure {result['secondary_structure']}"
        )
        for domain in result.get("domains", []):
            lines.append(
                f"     {domain['name']} [{domain['start']}, {domain['end']}) "
                f"{domain['domain_type']} (confidence {domain['confidence']:.2f})"
            )
    elif operation == "energy":
        lines.append(f"  • {result['force_field']} total {result['total']:.1f} kcal/mol")
        for term in ("bond", "angle", "dihedral", "vdw", "electrostatic", "solvation"):
            lines.append(f"     {term}: {result[term]:.1f}")
    return "\n".join(lines)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a bio engine derivation without starting the API.")
    parser.add_argument("--preset", choices=sorted(_PRESETS), default="caffeine", help="Ready-made input to run")
    parser.add_argument("--operation", choices=_OPERATIONS, default=None, help="Override the preset operation")
    parser.add_argument("--text", default=None, help="Override the preset molecule, target or sequence")
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Operation option such as steps=5000 or library_size=2000 (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Print the raw JSON payload instead of a summary")
    parser.add_argument("--list-presets", action="store_true", help="List built-in presets and exit")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.list_presets:
        lines = ["Available presets:"]
        for name in sorted(_PRESETS):
            lines.append(f"  • {name} ({_PRESETS[name].operation}): {_PRESETS[name].description}")
        print("\n".join(lines))
        return 0

    preset = _PRESETS[args.preset]
    operation = args.operation or preset.operation
    text = preset.text if args.text is None else args.text

    try:
        payload = run_quickstart(operation, text, _parse_options(args.option))
    except QuickstartError as exc:
        parser.error(str(exc))
        return 2

    if args.json:
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(summarise_quickstart(payload))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
