"""HTTP API for the demandas service."""
