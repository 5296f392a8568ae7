"""JSON exporters for fused earthquakes and risk assessments."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from volcanic_risk.aggregator import FusedResult
from volcanic_risk.models import RiskAssessment


def build_envelope(result: FusedResult, generated: datetime | None = None) -> dict[str, Any]:
    """Wrap fused events as ``{success, generated, count, stats, earthquakes}``."""
    generated = generated or datetime.now(tz=timezone.utc)
    return {
        "success": True,
        "generated": generated.isoformat(),
        "count": len(result.events),
        "stats": asdict(result.stats),
        "earthquakes": [asdict(e) for e in result.events],
    }


def export_json(
    result: FusedResult,
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Export fused earthquakes to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(build_envelope(result), f, indent=indent, ensure_ascii=False)
    return output_path


def export_assessments_json(
    assessments: list[RiskAssessment],
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Export risk assessments to a JSON file."""
    data = [asdict(a) for a in assessments]
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)
    return output_path
