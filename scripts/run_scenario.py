"""CLI for running offline Automail scenarios defined in JSON configs."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional

from automail import Simulation, SimulationConfig


def build_simulation(config: Dict) -> Simulation:
    building_cfg = config.get("building", {})
    robots_cfg = config.get("robots", {})
    mail_cfg = config.get("mail", {})

    options = {
        "num_floors": building_cfg.get("num_floors", 10),
        "mailroom_floor": building_cfg.get("mailroom_floor", 1),
        "robot_count": robots_cfg.get("count", 3),
        "capacity_tier": robots_cfg.get("capacity_tier", "THREE"),
        "mail_to_create": mail_cfg.get("count", 80),
        "mail_max_weight": mail_cfg.get("max_weight", 2000),
        "arrival_window": mail_cfg.get("arrival_window", 60),
        "pool_ordering": config.get("pool", {}).get("ordering", "floor"),
        "penalty": config.get("penalty", 1.2),
        "random_seed": config.get("random_seed"),
        "metrics_hook_interval": config.get("metrics_hook_interval", 10),
    }
    return Simulation(SimulationConfig(**options))


def run_simulation(simulation: Simulation, config: Dict) -> List[Dict]:
    max_ticks = config.get("max_ticks", 10000)
    snapshots: List[Dict] = []
    simulation.on_event("metrics", lambda payload: snapshots.append(asdict(payload["metrics"])))
    simulation.run(max_ticks=max_ticks)
    return snapshots


def save_results(output_path: Optional[Path], data: Dict) -> None:
    if not output_path:
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("config", type=Path, help="Path to a JSON scenario configuration file")
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional file path to write metrics snapshots as JSON",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every robot state change")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = json.loads(args.config.read_text())
    simulation = build_simulation(config)
    snapshots = run_simulation(simulation, config)

    final_metrics = asdict(simulation.report.snapshot(simulation.current_time))
    results = {
        "scenario": config.get("name", args.config.stem),
        "description": config.get("description"),
        "ticks": simulation.current_time,
        "complete": simulation.is_complete(),
        "pool_ordering": simulation.mail_pool.ordering_name,
        "faults": simulation.faults,
        "final_metrics": final_metrics,
        "metrics_over_time": snapshots,
    }

    save_results(args.output, results)

    print(f"Scenario: {results['scenario']}")
    if results["description"]:
        print(results["description"])
    print(f"Pool ordering: {results['pool_ordering']}")
    print(f"Simulation time: {results['ticks']} ticks")
    if not results["complete"]:
        print(f"Incomplete: {final_metrics['delivered']} of {simulation.total_mail} items delivered")
    print("Final metrics:")
    for key, value in final_metrics.items():
        print(f"  {key}: {value}")
    if args.output:
        print(f"Saved metrics to {args.output}")


if __name__ == "__main__":
    main()
