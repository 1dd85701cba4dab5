"""Observability: structured logging, Prometheus metrics and the error log file.

Provides standardized observability primitives using structlog for logging
and prometheus_client for metrics.
"""
