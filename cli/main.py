"""ssdbench CLI - Command line interface."""

import argparse
import asyncio
import sys

import yaml

from common.exceptions import PhaseFailedError, ProfileError
from common.models.workload import PHASE_ORDER, BenchmarkProfile
from harness.config import init_settings
from harness.main import configure_logging, run_benchmark


def _settings_from_args(args):
    """Build settings from CLI flags; unset flags fall back to the environment."""
    overrides = {}
    if getattr(args, "workspace", None):
        overrides["workspace_root"] = args.workspace
    if getattr(args, "profile", None):
        overrides["profile_path"] = args.profile
    if getattr(args, "log_level", None):
        overrides["log_level"] = args.log_level
    if getattr(args, "summary", None):
        overrides["summary_path"] = args.summary
    if getattr(args, "concurrency", None):
        overrides["max_concurrency"] = args.concurrency
    return init_settings(**overrides)


def _load_profile(settings, phases=None) -> BenchmarkProfile:
    try:
        profile = settings.load_profile()
        if phases:
            profile = profile.with_phases(phases)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ProfileError(f"Invalid profile: {e}") from e
    return profile


def cmd_run(args):
    """Run the benchmark."""
    settings = _settings_from_args(args)
    configure_logging(settings)
    try:
        profile = _load_profile(settings, args.phase)
    except ProfileError as e:
        print(f"Error: {e}")
        return 2

    print(f"Running profile '{profile.name}' in {settings.workspace_root}")
    try:
        report = asyncio.run(run_benchmark(settings, profile))
    except PhaseFailedError as e:
        print(f"\nBenchmark aborted in phase '{e.phase}': {e.cause}")
        return 1
    return 0 if report.succeeded else 1


def cmd_phases(args):
    """List phases in run order."""
    settings = _settings_from_args(args)
    try:
        selected = set(_load_profile(settings).selected_phases())
    except ProfileError as e:
        print(f"Error: {e}")
        return 2

    print(f"{'#':<4} {'Phase':<26} {'Enabled':<8}")
    print("-" * 40)
    for i, name in enumerate(PHASE_ORDER, start=1):
        print(f"{i:<4} {name:<26} {'yes' if name in selected else 'no':<8}")
    return 0


def cmd_profile(args):
    """Print the effective profile as YAML."""
    settings = _settings_from_args(args)
    try:
        profile = _load_profile(settings)
    except ProfileError as e:
        print(f"Error: {e}")
        return 2
    print(yaml.safe_dump(profile.model_dump(mode="json"), default_flow_style=False, sort_keys=False), end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssdbench",
        description="Storage device benchmark harness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-p", "--profile", help="Benchmark profile YAML (default: built-in)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run
    run_parser = subparsers.add_parser("run", help="Run the benchmark phases")
    run_parser.add_argument("-w", "--workspace", help="Workspace root directory")
    run_parser.add_argument(
        "--phase", action="append", choices=PHASE_ORDER,
        help="Run only this phase (repeatable, run order is fixed)",
    )
    run_parser.add_argument("-c", "--concurrency", type=int, help="Fan-out concurrency bound")
    run_parser.add_argument("--log-level", help="Logging level (default: INFO)")
    run_parser.add_argument("--summary", help="Write a JSON run summary to this path")
    run_parser.set_defaults(func=cmd_run)

    # phases
    phases_parser = subparsers.add_parser("phases", help="List phases in run order")
    phases_parser.set_defaults(func=cmd_phases)

    # profile
    profile_parser = subparsers.add_parser("profile", help="Show the effective profile")
    profile_parser.set_defaults(func=cmd_profile)

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
