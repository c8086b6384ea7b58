"""Observability helpers: JSON logging, request context and Prometheus metrics.

Request ids travel through structlog contextvars; every record (ours and
uvicorn's) leaves the process as one JSON line on stdout.
"""
