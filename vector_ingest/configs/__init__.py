"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
Pipeline-specific settings live beside the pipeline in
vector_ingest.core.document_processing.configs.
"""

from vector_ingest.configs.base import BaseSettings, get_settings

__all__ = ["BaseSettings", "get_settings"]
