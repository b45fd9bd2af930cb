"""HTTP API: stage endpoints, broker callbacks and job status."""
