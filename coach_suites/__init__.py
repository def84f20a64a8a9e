"""
Decision Coach test suites package.

Kept importable so that:
  - scenarios import the framework and page objects by absolute path
  - the runner (`run_tests.py`) can reuse the readiness checker
  - unit and UI conftests resolve consistently under pytest and xdist
"""
