"""HTTP API package (FastAPI)."""
