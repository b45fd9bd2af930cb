"""Application layer: stage handlers and job-level services."""
