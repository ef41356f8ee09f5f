from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Any, Dict

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import yaml

from road_sim.simulation import SimConfig, Simulation
from telemetry.logger import TelemetryLogger


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless road sim with AI cars and dummy traffic.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Override sim.max_steps.",
    )
    parser.add_argument(
        "--no-telemetry",
        action="store_true",
        help="Do not write the JSONL telemetry log.",
    )
    args = parser.parse_args()

    cfg = load_yaml(args.config)
    sim_cfg = SimConfig.from_dict(cfg)
    if args.steps is not None:
        sim_cfg = dataclasses.replace(sim_cfg, max_steps=args.steps)
    logging_cfg = cfg.get("logging", {})
    print_every = int(logging_cfg.get("print_every", 100))

    telemetry = None
    if not args.no_telemetry:
        telemetry = TelemetryLogger(logging_cfg.get("telemetry_path", "runs/telemetry.jsonl"))

    sim = Simulation(sim_cfg, telemetry=telemetry)
    print(
        f"Running {sim_cfg.num_cars} AI cars against {len(sim.traffic)} traffic cars "
        f"for up to {sim_cfg.max_steps} steps."
    )

    info: Dict[str, Any] = {"step": 0}
    try:
        while not sim.done():
            info = sim.step()
            if print_every > 0 and info["step"] % print_every == 0:
                print(f"  step {info['step']}: alive={info['alive']} best_y={info['best_y']:.1f}")
    except KeyboardInterrupt:
        print("Stopping simulation (KeyboardInterrupt).")
    finally:
        if telemetry is not None:
            telemetry.close()

    print(f"Finished after {sim.step_count} steps, {info.get('damaged', 0)} cars damaged.")


if __name__ == "__main__":
    main()
