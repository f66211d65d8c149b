"""Step definitions for the browser scenarios, grouped by feature.

All modules are star-imported by tests/e2e/conftest.py so pytest-bdd can
discover their steps and fixtures.
"""
