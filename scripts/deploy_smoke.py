#!/usr/bin/env python3
"""Deployment smoke test: run the deploy script, then invalidate the CDN.

Runs the same pipeline pieces a push to the deployment branch triggers,
without going through the webhook, and fails fast if the script cannot
start or exits non-zero.
"""

import argparse
import asyncio
import logging

from src.config.loader import load_config
from src.deploy import CacheInvalidator, DeploymentRunner, targets_from_settings
from src.exceptions import ScriptStartError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--script",
        default=None,
        help="Override the deploy script (defaults to SCRIPT).",
    )
    parser.add_argument(
        "--skip-invalidation",
        action="store_true",
        help="Only run the script, leave CloudFront alone.",
    )
    return parser


async def _run(args: argparse.Namespace) -> int:
    config = load_config()
    script_path = args.script or config.script_path

    print(f"Using script: {script_path}")
    runner = DeploymentRunner(script_path, shell=config.script_shell)
    try:
        result = await runner.run()
    except ScriptStartError as exc:
        print(f"FAIL: {exc}")
        return 1

    print(
        f"Script exited {result.returncode} after {result.duration_seconds:.1f}s "
        f"({result.stdout_lines} stdout / {result.stderr_lines} stderr lines)"
    )
    if not result.succeeded:
        print("FAIL: deploy script exited non-zero.")
        return 1

    if args.skip_invalidation:
        print("PASS: deploy script succeeded (invalidation skipped).")
        return 0

    outcomes = await CacheInvalidator(targets_from_settings(config)).invalidate_all()
    if not outcomes:
        print("No invalidations sent (no distributions or no AWS credentials).")
    for outcome in outcomes:
        status = "ok" if outcome.succeeded else f"error: {outcome.error}"
        print(f"Invalidation {outcome.target.name}: {status}")

    if any(not outcome.succeeded for outcome in outcomes):
        print("FAIL: at least one invalidation failed.")
        return 1

    print("PASS: deployment smoke test succeeded.")
    return 0


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = _build_parser()
    args = parser.parse_args()
    try:
        code = asyncio.run(_run(args))
    except Exception as exc:
        print(f"FAIL: smoke test crashed: {exc}")
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
