"""
Test suites package.

This repository intentionally keeps `testsuites` importable to support:
  - IDE navigation
  - the UI interaction framework (`testsuites.ui_testing.framework`)
  - CI/CD module imports

No credentials are stored here; live runs take them from the environment.
"""
