#!/usr/bin/env python3
"""Validate local seating engine environment readiness."""

from __future__ import annotations

import importlib
import random
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from seatplan.domain.models import DistributionStrategy, Member
from seatplan.services.grid_assigner import count_adjacent_conflicts
from seatplan.services.seating_service import generate_seating
from seatplan.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _sample_roster() -> list[Member]:
    roster: list[Member] = []
    for grade in ("Grade 8", "Grade 9"):
        for class_index in range(1, 4):
            for student_index in range(1, 21):
                roster.append(
                    Member(
                        name=f"{grade} C{class_index} S{student_index:02d}",
                        group=f"Class {class_index}",
                        partition_key=grade,
                    )
                )
    return roster


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1 - Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 - Required packages importable with versions
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3 - Settings load
    settings = None
    try:
        settings = get_settings()
        ok, line = _print_result(
            "Settings",
            True,
            f": capacity={settings.seating_default_capacity} strategy={settings.seating_default_strategy}",
        )
    except ValueError as exc:
        ok, line = _print_result("Settings", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4 - Smoke allocation (120 members, 2 partitions)
    if settings is not None:
        roster = _sample_roster()
        try:
            arrangements = generate_seating(
                roster,
                30,
                DistributionStrategy.PACK_LAST,
                settings.seating_partition_prefixes,
                settings.seating_min_per_group,
                random.Random(7),
                partition_order=settings.seating_partition_order,
                default_prefix=settings.seating_default_prefix,
            )
            placed = sum(len(item.placements) for item in arrangements)
            if placed != len(roster):
                raise RuntimeError(f"expected {len(roster)} placements, got {placed}")
            conflicts = sum(count_adjacent_conflicts(item.placements) for item in arrangements)
            ok, line = _print_result(
                "Smoke allocation",
                True,
                f": rooms={len(arrangements)} placed={placed} adjacent_conflicts={conflicts}",
            )
        except Exception as exc:
            ok, line = _print_result("Smoke allocation", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Seating Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
