#!/usr/bin/env python3
# siqpack/tests/run_tests.py
"""
Test runner script for siqpack tests

Usage:
    # From the project root:
    python -m pytest siqpack/tests -v

    # Or run this script:
    python siqpack/tests/run_tests.py

    # With coverage:
    python siqpack/tests/run_tests.py --cov
"""
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent
PROJECT_ROOT = TESTS_DIR.parent.parent

# Add project root to path so 'siqpack' package is importable
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def main():
    """Run all tests with optional coverage"""
    import pytest

    args = [
        str(TESTS_DIR),
        '-v',
        '--tb=short',
    ]

    if '--cov' in sys.argv:
        args.extend([
            '--cov=siqpack',
            '--cov-report=term-missing',
        ])
        sys.argv.remove('--cov')

    args.extend(sys.argv[1:])

    return pytest.main(args)


if __name__ == '__main__':
    sys.exit(main())
