"""Logging and in-process telemetry for the extraction engine."""
