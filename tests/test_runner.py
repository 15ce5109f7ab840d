#!/usr/bin/env python3
"""Test runner script for fsmirror tests.

Usage:
    python tests/test_runner.py              # Run all tests
    python tests/test_runner.py unit         # Run unit tests only
    python tests/test_runner.py integration  # Run integration tests only
"""
import importlib.util
import subprocess
import sys


def run_tests(test_type="all"):
    """Run tests based on type."""
    cmd = [sys.executable, "-m", "pytest"]

    if test_type == "unit":
        cmd.extend(["-m", "unit", "tests/unit/"])
    elif test_type == "integration":
        cmd.extend(["-m", "integration", "tests/integration/"])
    elif test_type == "all":
        cmd.append("tests/")
    else:
        print(f"Unknown test type: {test_type}")
        sys.exit(1)

    # Add coverage if available
    if importlib.util.find_spec("pytest_cov") is not None:
        cmd.extend(["--cov=fsmirror", "--cov-report=term"])

    print(f"Running {test_type} tests...")
    result = subprocess.run(cmd)
    sys.exit(result.returncode)


if __name__ == "__main__":
    test_type = sys.argv[1] if len(sys.argv) > 1 else "all"
    run_tests(test_type)
