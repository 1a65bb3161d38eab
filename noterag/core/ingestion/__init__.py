"""
Ingestion module initialization.
"""

from .pipeline import IngestionPipeline

__all__ = ["IngestionPipeline"]
