# MIT License © 2025 Motohiro Suzuki
"""
tools/check_scenario_coverage.py

Ensures that every failure scenario defined in scenarios/scenario_table.yml
has corresponding executable evidence (a test and a runner script), and that
the referenced test function actually exists.

If any scenario is missing evidence, CI MUST FAIL.
"""

import sys
from pathlib import Path

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SCENARIO_TABLE = PROJECT_ROOT / "scenarios" / "scenario_table.yml"


def fail(msg: str):
    print(f"[FAIL] {msg}")
    sys.exit(1)


def find_missing(root: Path, scenarios: list) -> list:
    missing = []
    seen = set()

    for sc in scenarios:
        sid = sc.get("scenario_id")
        test_ref = sc.get("evidence_test")
        script_ref = sc.get("evidence_script")

        if not sid:
            missing.append("scenario without scenario_id")
            continue
        if sid in seen:
            missing.append(f"{sid}: duplicate scenario_id")
        seen.add(sid)

        if test_ref:
            test_path, _, func = test_ref.partition("::")
            path = root / test_path
            if not path.exists():
                missing.append(f"{sid}: missing test {test_path}")
            elif func and f"def {func}(" not in path.read_text(encoding="utf-8"):
                missing.append(f"{sid}: test function {func} not found in {test_path}")
        else:
            missing.append(f"{sid}: evidence_test not defined")

        if script_ref:
            if not (root / script_ref).exists():
                missing.append(f"{sid}: missing script {script_ref}")
        else:
            missing.append(f"{sid}: evidence_script not defined")

    return missing


def main():
    if not SCENARIO_TABLE.exists():
        fail(f"scenario table not found: {SCENARIO_TABLE}")

    data = yaml.safe_load(SCENARIO_TABLE.read_text(encoding="utf-8")) or {}

    scenarios = data.get("scenarios", [])
    if not scenarios:
        fail("no scenarios defined in scenario_table.yml")

    missing = find_missing(PROJECT_ROOT, scenarios)
    if missing:
        print("[FAIL] scenario coverage incomplete:")
        for m in missing:
            print(f"  - {m}")
        sys.exit(1)

    print(f"[OK] scenario coverage complete ({len(scenarios)} scenarios)")


if __name__ == "__main__":
    main()
