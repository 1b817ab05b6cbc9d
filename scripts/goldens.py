#!/usr/bin/env python3
"""
Run RAScript golden cases through the compiler.

Assumptions:
- Golden file defaults to tests/goldens.yaml
- Each case has a `script` and an `expect` block listing the serialized
  achievement triggers, leaderboard definitions, or the error code the
  script must fail with
- Requires: PyYAML  (install via: pip install -e .[dev])
"""

from __future__ import annotations
import argparse
import sys
import time
from typing import Any, Dict, List

import yaml

from rascript.config import RAScriptConfig
from rascript.interpreter.script import AchievementScriptInterpreter


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run RAScript golden cases.")
    p.add_argument(
        "--file",
        default="tests/goldens.yaml",
        help="Path to golden cases YAML (default: %(default)s)",
    )
    p.add_argument(
        "--stop-on-fail",
        action="store_true",
        help="Stop after the first failure (default: continue).",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output (print compiled output).",
    )
    return p.parse_args()


def color(s: str, c: str) -> str:
    codes = {"red": "31", "green": "32", "yellow": "33", "cyan": "36"}
    return f"\x1b[{codes.get(c,'0')}m{s}\x1b[0m"


def load_goldens(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict) or "cases" not in data:
        raise ValueError("Golden file missing top-level 'cases' key.")
    return data


def check_case(case: Dict[str, Any]) -> List[str]:
    """Compile one case and return the mismatches (empty when it passes)."""
    interpreter = AchievementScriptInterpreter(RAScriptConfig())
    ok = interpreter.run(case.get("script", ""))
    expect = case.get("expect", {})
    details: List[str] = []

    exp_error = expect.get("error")
    if exp_error is not None:
        if ok:
            details.append(f"expected {exp_error}, compiled successfully")
        elif interpreter.error.code != exp_error:
            details.append(f"error {interpreter.error.describe()} != {exp_error}")
        return details

    if not ok:
        details.append(f"unexpected error {interpreter.error.describe()}")
        return details

    if "achievements" in expect:
        actual = [a.trigger for a in interpreter.achievements]
        if actual != expect["achievements"]:
            details.append(f"achievements {actual} != {expect['achievements']}")

    if "leaderboards" in expect:
        actual = [lb.serialize() for lb in interpreter.leaderboards]
        if actual != expect["leaderboards"]:
            details.append(f"leaderboards {actual} != {expect['leaderboards']}")

    return details


def run_cases(goldens: Dict[str, Any], verbose: bool, stop_on_fail: bool) -> int:
    total = 0
    total_fail = 0
    start_time = time.time()

    for case in goldens.get("cases", []):
        total += 1
        name = case.get("name", "<unnamed>")
        details = check_case(case)
        if verbose:
            print(color(f"[CASE] {name}", "cyan"), case.get("script", "").strip())

        if not details:
            print(color(f"[OK]   {name}", "green"))
            continue

        print(color(f"[FAIL] {name}", "red"))
        for d in details:
            print("       -", d)
        total_fail += 1
        if stop_on_fail:
            return total_fail

    dur_ms = int((time.time() - start_time) * 1000)
    passed = total - total_fail
    print()
    print(color(f"Summary: {passed}/{total} passed in {dur_ms} ms", "yellow" if total_fail else "green"))
    return total_fail


def main() -> int:
    args = parse_args()
    try:
        goldens = load_goldens(args.file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(color(f"Failed to load goldens: {e}", "red"))
        return 2

    failures = run_cases(goldens, verbose=args.verbose, stop_on_fail=args.stop_on_fail)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
