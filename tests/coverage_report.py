# File: tests/coverage_report.py
#!/usr/bin/env python3
"""
Generate test coverage report for the SmartPark engine.
Requires: pip install -e .[test]
"""

import coverage
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))
sys.path.insert(0, str(PROJECT_ROOT))


def generate_coverage_report() -> bool:
    """Run all suites under coverage; returns True when every test passed"""
    cov = coverage.Coverage(
        source=[str(PROJECT_ROOT / 'src' / 'smartpark')],
        omit=['*/tests/*', '*/__pycache__/*']
    )
    cov.start()

    try:
        # Imported after start so module-level code is measured
        from tests.run_tests import run_all_tests
        result = run_all_tests()
    finally:
        cov.stop()
        cov.save()

    print("\n" + "=" * 60)
    print("Test Coverage Report")
    print("=" * 60)

    cov.report(show_missing=True)

    cov.html_report(directory='htmlcov')
    print("HTML report generated in 'htmlcov' directory")

    cov.xml_report(outfile='coverage.xml')
    print("XML report generated as 'coverage.xml'")

    return result.wasSuccessful()


if __name__ == "__main__":
    sys.exit(0 if generate_coverage_report() else 1)
