"""
Boundary layer: adapters for the status/result store, job queue, primary
record store, credit ledger, language models and document storage.
"""
