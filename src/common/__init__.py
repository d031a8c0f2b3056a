"""
Shared infrastructure: cache, resilience, telemetry and logging helpers.
"""
