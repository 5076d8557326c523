"""
Platform Simulation CLI

Plays the scoring and hierarchy engines from the command line. Delayed
completions (issue fixes, check re-runs, deployment settle) run on a
virtual clock, so every command finishes immediately.

Usage Examples:
    # List built-in scenarios (or those of a YAML file)
    platform-sim scenarios
    platform-sim scenarios --file my_scenarios.yaml

    # Load a scenario, add components and score the objectives
    platform-sim score --scenario getting-started --add api,cache,monitoring

    # Same, then fix every open issue
    platform-sim score --scenario security-crisis --resolve-all

    # Evaluate the SecRel checkpoints with a fixed seed
    platform-sim checkpoints --scenario scaling-challenge --seed 7

    # Build a hierarchy from a layout file and show utilisation
    platform-sim layout examples/layout.yaml --transitive
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from platform_sim.adapters.outbound.yaml_loader import apply_layout, load_layout, load_scenarios
from platform_sim.config import Container, Settings
from platform_sim.domain.config.scenarios import SCENARIOS
from platform_sim.domain.models import ComponentType, Position, Scenario
from platform_sim.domain.services import create_component


# =============================================================================
# Argument Parsing
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with subcommands."""
    common_parser = argparse.ArgumentParser(add_help=False)

    sim_group = common_parser.add_argument_group("Simulation")
    sim_group.add_argument("--seed", type=int, default=None, help="Random seed for checkpoint draws")

    output_group = common_parser.add_argument_group("Output")
    output_group.add_argument("--output", "-o", metavar="FILE", help="Export results to JSON")
    output_group.add_argument("--json", action="store_true", help="Print JSON to stdout")
    output_group.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    output_group.add_argument("--quiet", "-q", action="store_true", help="Minimal output")
    output_group.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    parser = argparse.ArgumentParser(
        prog="platform-sim",
        description="Educational platform-building simulator: scoring and hierarchy engines.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subs = parser.add_subparsers(dest="command", help="Command")

    # scenarios
    sc = subs.add_parser("scenarios", help="List scenarios", parents=[common_parser])
    sc.add_argument("--file", "-f", metavar="YAML", help="Scenario file instead of built-ins")

    # score
    sp = subs.add_parser("score", help="Score a platform built from a scenario", parents=[common_parser])
    sp.add_argument("--scenario", "-s", metavar="ID", help="Scenario to load")
    sp.add_argument("--file", "-f", metavar="YAML", help="Scenario file to look the id up in")
    sp.add_argument(
        "--add", "-a", default="",
        help="Comma-separated component types to add (e.g. api,cache)",
    )
    sp.add_argument("--resolve-all", action="store_true", help="Fix every open issue")

    # checkpoints
    cp = subs.add_parser("checkpoints", help="Run the SecRel checkpoint pipeline", parents=[common_parser])
    cp.add_argument("--scenario", "-s", metavar="ID", help="Scenario to load")
    cp.add_argument("--file", "-f", metavar="YAML", help="Scenario file to look the id up in")
    cp.add_argument("--add", "-a", default="", help="Comma-separated component types to add")
    cp.add_argument("--rerun-failed", action="store_true", help="Re-run every failed check once")

    # layout
    ly = subs.add_parser("layout", help="Build a node hierarchy from a layout file", parents=[common_parser])
    ly.add_argument("path", metavar="YAML", help="Layout file")
    ly.add_argument("--transitive", action="store_true", help="Roll up resources over whole subtrees")

    return parser


# =============================================================================
# Helpers
# =============================================================================

def _parse_types(raw: str) -> List[ComponentType]:
    types = []
    for item in filter(None, (t.strip() for t in raw.split(","))):
        try:
            types.append(ComponentType(item))
        except ValueError:
            valid = ", ".join(t.value for t in ComponentType)
            raise ValueError(f"Unknown component type '{item}'. Valid: {valid}")
    return types


def _resolve_scenario(args) -> Optional[Scenario]:
    if not args.scenario:
        return None
    pool = load_scenarios(args.file) if args.file else SCENARIOS
    for scenario in pool:
        if scenario.id == args.scenario:
            return scenario
    raise ValueError(f"Unknown scenario '{args.scenario}'")


def _prepare_session(args, container: Container):
    session = container.session()
    scenario = _resolve_scenario(args)
    if scenario is not None:
        session.load_scenario(scenario)
    for i, ctype in enumerate(_parse_types(args.add)):
        session.engine.add_component(
            create_component(ctype, position=Position(x=100 + 150 * i, y=400))
        )
    return session


# =============================================================================
# Command Handlers
# =============================================================================

def handle_scenarios(args, container, display) -> dict:
    scenarios = load_scenarios(args.file) if args.file else SCENARIOS
    if not args.quiet:
        display.display_scenarios(scenarios)
    return {
        "scenarios": [
            {
                "id": s.id,
                "title": s.title,
                "difficulty": s.difficulty.value,
                "budget": s.budget,
                "objectives": [o.id for o in s.objectives],
            }
            for s in scenarios
        ]
    }


def handle_score(args, container, display) -> dict:
    session = _prepare_session(args, container)
    engine = session.engine

    if args.resolve_all:
        for issue in engine.get_state().issues:
            engine.begin_issue_resolution(issue.id)
        container.scheduler().run_all()

    state = engine.get_state()
    summary = engine.summarize_issues()
    progress = session.progress()

    if not args.quiet:
        display.display_state(state)
        display.display_issue_summary(summary)
        if progress is not None:
            display.display_progress(progress)

    result = {"state": state.to_dict(), "issue_summary": summary.to_dict()}
    if progress is not None:
        result["progress"] = {
            "scenario_id": progress.scenario_id,
            "score": progress.score,
            "within_budget": progress.within_budget,
            "completed": progress.completed,
            "objectives": [
                {"id": r.objective_id, "metric": r.metric, "actual": r.actual,
                 "target": r.target, "met": r.met}
                for r in progress.results
            ],
        }
    return result


def handle_checkpoints(args, container, display) -> dict:
    session = _prepare_session(args, container)
    pipeline = session.checkpoints
    pipeline.sync(session.engine.get_state().components)

    if args.rerun_failed:
        for checkpoint in pipeline.checkpoints:
            if not checkpoint.passed:
                pipeline.run_check(checkpoint.id)
        container.scheduler().run_all()

    if not args.quiet:
        display.display_checkpoints(pipeline.checkpoints, pipeline.pass_rate)

    return {
        "pass_rate": pipeline.pass_rate,
        "checkpoints": [cp.to_dict() for cp in pipeline.checkpoints],
    }


def handle_layout(args, container, display) -> dict:
    if args.transitive:
        container.settings.transitive_rollup = True
    store = container.hierarchy_store()

    layout = load_layout(args.path)
    outcome = apply_layout(layout, store)
    container.scheduler().run_all()

    state = store.get_state()
    problems = store.verify_integrity()
    if not args.quiet:
        display.display_hierarchy(state, outcome.rejected)
        for problem in problems:
            print(display.colored(f"  integrity: {problem}", display.Colors.RED))

    result = state.to_dict()
    result["rejected"] = outcome.rejected
    result["integrity_problems"] = problems
    return result


# =============================================================================
# Main Entry Point
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    log_level = (
        logging.WARNING if args.quiet
        else logging.DEBUG if args.verbose
        else logging.INFO
    )
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    settings = Settings.from_env()
    if args.seed is not None:
        settings.random_seed = args.seed
    container = Container.from_settings(settings)
    display = container.display_service(use_color=not args.no_color)

    try:
        handlers = {
            "scenarios": handle_scenarios,
            "score": handle_score,
            "checkpoints": handle_checkpoints,
            "layout": handle_layout,
        }
        result_data = handlers[args.command](args, container, display)

        if args.json:
            print(json.dumps(result_data, indent=2, default=str))

        if args.output:
            with open(args.output, "w") as f:
                json.dump(result_data, f, indent=2, default=str)
            if not args.quiet:
                print(f"\n{display.colored(f'Results saved to: {args.output}', display.Colors.GREEN)}")

        return 0

    except KeyboardInterrupt:
        print("\nSimulation interrupted.")
        return 130
    except (ValueError, OSError) as e:
        print(display.colored(f"Error: {e}", display.Colors.RED), file=sys.stderr)
        if args.verbose:
            logging.exception("Command failed")
        return 1
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
