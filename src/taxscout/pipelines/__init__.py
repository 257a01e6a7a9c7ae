"""
Pipelines Package

Batch jobs: property export and lien enrichment.
"""
from src.taxscout.pipelines.lien_enrichment import LienEnrichmentPipeline
from src.taxscout.pipelines.property_export import PriceFilterPolicy, PropertyExportPipeline

__all__ = ["LienEnrichmentPipeline", "PriceFilterPolicy", "PropertyExportPipeline"]
