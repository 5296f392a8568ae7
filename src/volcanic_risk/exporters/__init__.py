"""Exporters for fused earthquakes and volcanic risk assessments."""

from volcanic_risk.exporters.geojson_export import export_geojson
from volcanic_risk.exporters.json_export import export_assessments_json, export_json
from volcanic_risk.exporters.markdown_export import export_markdown

__all__ = ["export_assessments_json", "export_geojson", "export_json", "export_markdown"]
