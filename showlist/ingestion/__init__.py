"""
Ingestion layer: text extraction, normalization, deduplication, indexing
and the orchestrator that runs them in order.
"""
