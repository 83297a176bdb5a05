#!/usr/bin/env python
"""Local quality checks and tests runner for circuitsim.

Runs formatting, import ordering, lint, typing, dead-code, complexity and
test checks over the package and its tests, with optional automatic fixes
for formatting and import ordering.

Usage:
    python run_quality_checks.py                    # Run all checks (no fixes)
    python run_quality_checks.py --fix              # Run all checks + auto fixes
    python run_quality_checks.py --fix --skip lint  # Fix but skip linting
    python run_quality_checks.py --only tests       # Just the test suite
"""

import argparse
import subprocess
import sys
from typing import Callable, Optional

# Directories to check
PACKAGE_DIR = "circuitsim"
TESTS_DIR = "tests"
EXAMPLES_DIR = "examples"
DIRS_TO_CHECK = [PACKAGE_DIR, TESTS_DIR, EXAMPLES_DIR]

RULE = "=" * 70


class CheckRunner:
    """Runs quality checks and tests with optional auto-fixes."""

    def __init__(
        self,
        fix: bool = False,
        verbose: bool = False,
        skip_checks: Optional[list[str]] = None,
    ):
        self.fix = fix
        self.verbose = verbose
        self.skip_checks = skip_checks or []
        self.failed_checks: list[str] = []
        self.passed_checks: list[str] = []

    def run_command(self, cmd: list[str], name: str, show_output: bool = True) -> bool:
        """Run a command and record whether it succeeded.

        Args:
            cmd: Command and arguments as list
            name: Friendly name for the check
            show_output: Stream output instead of printing it only on failure

        Returns:
            True if command succeeded, False otherwise
        """
        print(f"\n{RULE}")
        print(f"[run ] {name}")
        print(RULE)

        try:
            if self.verbose or show_output:
                result = subprocess.run(cmd, check=False)
            else:
                result = subprocess.run(cmd, check=False, capture_output=True, text=True)
                if result.returncode != 0:
                    print(result.stdout)
                    print(result.stderr)
        except FileNotFoundError as e:
            print(f"[FAIL] {e}")
            print("       Install the tools first: pip install -e .[test] black isort pylint mypy")
            self.failed_checks.append(name)
            return False

        if result.returncode == 0:
            print(f"[ ok ] {name}")
            self.passed_checks.append(name)
            return True

        print(f"[FAIL] {name}")
        self.failed_checks.append(name)
        return False

    def check_black_formatting(self) -> bool:
        if self.fix:
            return self.run_command(["black", *DIRS_TO_CHECK], "Black formatting (fix)")
        return self.run_command(["black", "--check", *DIRS_TO_CHECK], "Black formatting")

    def check_isort_imports(self) -> bool:
        if self.fix:
            return self.run_command(["isort", *DIRS_TO_CHECK], "isort imports (fix)")
        return self.run_command(["isort", "--check-only", *DIRS_TO_CHECK], "isort imports")

    def check_pylint(self) -> bool:
        return self.run_command(["pylint", PACKAGE_DIR], "Pylint", show_output=self.verbose)

    def check_mypy(self) -> bool:
        return self.run_command(["mypy", PACKAGE_DIR], "Mypy")

    def check_vulture(self) -> bool:
        return self.run_command(
            ["vulture", PACKAGE_DIR, "--min-confidence", "80"],
            "Vulture dead code",
        )

    def check_radon_complexity(self) -> bool:
        return self.run_command(["radon", "cc", PACKAGE_DIR, "-a", "-nc"], "Radon complexity")

    def run_tests(self) -> bool:
        """Run pytest with coverage of the package."""
        return self.run_command(
            ["pytest", f"--cov={PACKAGE_DIR}", "--cov-report=term-missing", TESTS_DIR],
            "Pytest + coverage",
        )

    def checks(self) -> list[tuple[str, Callable[[], bool]]]:
        return [
            ("formatting", self.check_black_formatting),
            ("imports", self.check_isort_imports),
            ("lint", self.check_pylint),
            ("type", self.check_mypy),
            ("deadcode", self.check_vulture),
            ("complexity", self.check_radon_complexity),
            ("tests", self.run_tests),
        ]

    def print_summary(self) -> None:
        print(f"\n{RULE}")
        print("SUMMARY")
        print(RULE)

        for check in self.passed_checks:
            print(f"  [ ok ] {check}")
        for check in self.failed_checks:
            print(f"  [FAIL] {check}")
        if not self.failed_checks:
            print("\nAll checks passed.")

    def run_all(self, only: Optional[list[str]] = None) -> int:
        """Run the selected checks in order.

        Returns:
            0 if all checks passed, non-zero otherwise
        """
        mode = "with auto-fixes" if self.fix else "without fixes"
        print(f"Starting circuitsim quality checks {mode}")

        for check_name, check_func in self.checks():
            if check_name in self.skip_checks or (only and check_name not in only):
                print(f"[skip] {check_name}")
                continue
            check_func()

        self.print_summary()
        return 0 if not self.failed_checks else 1


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Run circuitsim quality checks and tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Check names: formatting, imports, lint, type, deadcode, complexity, tests

Examples:
  python run_quality_checks.py --fix
  python run_quality_checks.py --skip deadcode complexity
        """,
    )
    parser.add_argument(
        "--fix",
        "--apply",
        action="store_true",
        dest="fix",
        help="Automatically fix formatting and import ordering",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show all tool output")
    parser.add_argument("--skip", nargs="+", default=[], help="Checks to skip")
    parser.add_argument("--only", nargs="+", default=None, help="Run only these checks")
    args = parser.parse_args()

    runner = CheckRunner(fix=args.fix, verbose=args.verbose, skip_checks=args.skip)
    return runner.run_all(only=args.only)


if __name__ == "__main__":
    sys.exit(main())
