"""Effect parameter calibration: sweep each numeric param and measure change.

Run:  python -m glitchmixer.effects._calibration

Exits non-zero when a PARAMS schema is inconsistent or a param never
changes the test frame.
"""

import logging
import sys

import numpy as np

from glitchmixer.buffer import PixelBuffer
from glitchmixer.effects.registry import get, list_all
from glitchmixer.engine.determinism import RandomSource, derive_seed
from glitchmixer.options import parse_record

CALIBRATION_SEED = 12345
FRAME_W, FRAME_H = 200, 150

VALID_CURVES = {"linear", "logarithmic", "exponential", "s-curve"}
LEVELS = (0, 25, 50, 75, 100)

logger = logging.getLogger(__name__)


def _test_frame(w: int = FRAME_W, h: int = FRAME_H, seed: int = 42) -> np.ndarray:
    """Create a deterministic test frame (RGBA uint8)."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, (h, w, 4), dtype=np.uint8)


def _mean_diff(a: np.ndarray, b: np.ndarray) -> float:
    """Mean absolute pixel difference across RGB channels."""
    return float(
        np.mean(np.abs(a[:, :, :3].astype(np.float32) - b[:, :, :3].astype(np.float32)))
    )


def _default_params(params_schema: dict) -> dict:
    """Field defaults from a PARAMS schema; bytes params stay unset (random)."""
    return {
        k: pd["default"]
        for k, pd in params_schema.items()
        if pd.get("type") != "bytes" and pd.get("default") is not None
    }


def _render(eid: str, frame: np.ndarray, params: dict, secondary: np.ndarray) -> np.ndarray:
    """Run one effect on a copy of `frame` with its own seeded random stream."""
    entry = get(eid)
    if entry["options_key"] == "image_blend":
        params = {
            "secondary_data": secondary.tobytes(),
            "width": secondary.shape[1],
            "height": secondary.shape[0],
            **params,
        }
    record = parse_record(entry["options_type"], params, entry["options_key"])
    out = frame.copy()
    rng = RandomSource(derive_seed(CALIBRATION_SEED, eid))
    entry["fn"](PixelBuffer(out, frame.shape[1]), record, rng)
    return out


def calibrate_all() -> list[dict]:
    """Run calibration across all effects and params.

    Returns a list of result dicts:
      {effect_id, param, level_pct, value, mean_pixel_diff, curve, unit}

    mean_pixel_diff is measured against the untouched frame, so a row with
    0.0 at a non-zero level means the param had no visible effect there.
    """
    frame = _test_frame()
    secondary = _test_frame(64, 48, seed=7)
    results: list[dict] = []

    for effect_info in list_all():
        eid = effect_info["id"]
        params_schema = effect_info["params"]
        base_params = _default_params(params_schema)

        for param_key, pdef in params_schema.items():
            ptype = pdef.get("type")
            if ptype not in ("float", "int"):
                continue

            pmin = pdef.get("min", 0)
            pmax = pdef.get("max", 1)
            curve = pdef.get("curve", "linear")
            unit = pdef.get("unit", "")

            for level_pct in LEVELS:
                value = pmin + (pmax - pmin) * level_pct / 100.0
                if ptype == "int":
                    value = int(round(value))

                test_params = dict(base_params)
                test_params[param_key] = value

                out = _render(eid, frame, test_params, secondary)
                diff = _mean_diff(frame, out)

                results.append(
                    {
                        "effect_id": eid,
                        "param": param_key,
                        "level_pct": level_pct,
                        "value": value,
                        "mean_pixel_diff": round(diff, 2),
                        "curve": curve,
                        "unit": unit,
                    }
                )

    return results


def validate_params() -> list[str]:
    """Check every effect's PARAMS schema for internal consistency.

    Numeric params need a known curve and a default inside [min, max];
    choice params need their default among the listed options.
    """
    errors: list[str] = []
    for effect_info in list_all():
        for key, pdef in effect_info["params"].items():
            name = f"{effect_info['id']}.{key}"
            curve = pdef.get("curve")
            if curve is not None and curve not in VALID_CURVES:
                errors.append(f"{name}: unknown curve {curve!r}")
            if pdef.get("type") in ("float", "int"):
                low, high, default = pdef.get("min"), pdef.get("max"), pdef.get("default")
                if low is None or high is None or low >= high:
                    errors.append(f"{name}: bad range [{low}, {high}]")
                elif default is not None and not low <= default <= high:
                    errors.append(f"{name}: default {default} outside [{low}, {high}]")
            elif pdef.get("type") == "choice":
                if pdef.get("default") not in pdef.get("options", ()):
                    errors.append(f"{name}: default {pdef.get('default')!r} not an option")
    return errors


def summarize(results: list[dict]) -> list[dict]:
    """Collapse sweep rows into one row per (effect, param).

    Each row carries the change at every level plus flags:
      "inert"        no visible change at any level
      "front_loaded" 90%+ of the peak change already reached at 25%
    """
    grouped: dict[tuple[str, str], dict] = {}
    for r in results:
        row = grouped.setdefault(
            (r["effect_id"], r["param"]),
            {"effect_id": r["effect_id"], "param": r["param"], "curve": r["curve"], "levels": {}},
        )
        row["levels"][r["level_pct"]] = r["mean_pixel_diff"]

    for row in grouped.values():
        levels = row["levels"]
        peak = max(levels.values())
        flags = []
        if peak == 0:
            flags.append("inert")
        elif levels.get(25, 0.0) > 0.9 * peak:
            flags.append("front_loaded")
        row["flags"] = flags
    return list(grouped.values())


def format_report(summary: list[dict]) -> str:
    """Render a summary as a fixed-width table, one line per param."""
    header = f"{'param':<28}" + "".join(f"{pct:>8}%" for pct in LEVELS) + "  flags"
    lines = [header, "-" * len(header)]
    for row in summary:
        name = f"{row['effect_id']}.{row['param']}"
        cells = "".join(f"{row['levels'].get(pct, 0.0):>9.2f}" for pct in LEVELS)
        lines.append(f"{name:<28}{cells}  {','.join(row['flags'])}")
    return "\n".join(lines)


def main() -> int:
    errors = validate_params()
    for e in errors:
        logger.error("Schema error: %s", e)
    summary = summarize(calibrate_all())
    sys.stdout.write(format_report(summary) + "\n")
    inert = [f"{r['effect_id']}.{r['param']}" for r in summary if "inert" in r["flags"]]
    if inert:
        logger.warning("Params with no visible change: %s", ", ".join(inert))
    return 1 if errors or inert else 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
