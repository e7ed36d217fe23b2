#!/usr/bin/env python3
"""Test runner script for payguard."""

import sys
import subprocess
from pathlib import Path

MARKERS = ("unit", "validation", "dedup", "errors", "retry", "pipeline", "e2e")


def main():
    """Run tests with pytest."""
    project_root = Path(__file__).parent

    # Check if pytest is available
    try:
        import pytest  # noqa: F401
    except ImportError:
        print("❌ pytest is not installed. Please install it with:")
        print("   pip install -e '.[test]'")
        sys.exit(1)

    cmd = [
        sys.executable,
        "-m",
        "pytest",
        str(project_root / "tests"),
        "-v",
        "--tb=short",
        "--color=yes",
    ]

    # Add specific test markers if requested
    if len(sys.argv) > 1:
        if sys.argv[1] not in MARKERS:
            print(f"❌ Unknown test group '{sys.argv[1]}'. Choose from: {', '.join(MARKERS)}")
            sys.exit(1)
        cmd.extend(["-m", sys.argv[1]])

    print(f"🧪 Running tests: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, cwd=project_root)
        sys.exit(result.returncode)
    except KeyboardInterrupt:
        print("\n⏹️  Tests interrupted by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
