"""
Pytest configuration for unit tests.

Disables telemetry export so unit tests never try to reach a collector.
"""

import os


def pytest_configure(config):
    """Configure telemetry for unit tests."""
    os.environ["JUDGEFINDER_TELEMETRY_ENABLED"] = "false"
