"""Markdown exporter for volcanic risk assessments."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from volcanic_risk.models import RiskAssessment


def _factor_cell(assessment: RiskAssessment) -> str:
    """Factors that moved the multiplier away from 1.0."""
    active = [f"{name} {value:.2f}" for name, value in assessment.factors.items() if value != 1.0]
    return ", ".join(active) or "-"


def export_markdown(
    assessments: list[RiskAssessment],
    output_path: Path,
    *,
    generated: datetime | None = None,
) -> Path:
    """Export assessments as Markdown with a ranking table and per-volcano notes."""
    timestamp = (generated or datetime.now(tz=timezone.utc)).strftime("%Y-%m-%d %H:%M UTC")
    model = assessments[0].model if assessments else "-"
    lines: list[str] = [
        "# Volcanic Risk Report",
        f"Generated: {timestamp}",
        f"Model: {model}",
        "",
        "## Ranking",
        "",
        "| Volcano | Status | Category | P(30d) | P(1yr) | Multiplier"
        " | Confidence | Local Quakes | Factors |",
        "|:--------|:-------|:---------|-------:|-------:|-----------:"
        "|:-----------|-------------:|:--------|",
    ]

    for a in assessments:
        lines.append(
            f"| {a.volcano_name} | {a.status} | {a.category}"
            f" | {a.probability_30day:.2%} | {a.probability_1year:.2%}"
            f" | {a.combined_multiplier:.2f}"
            f" | {a.confidence}"
            f" | {a.statistics.local_count}"
            f" | {_factor_cell(a)} |"
        )

    # -- Notes for volcanoes with active indicators --
    noted = [a for a in assessments if a.scientific_notes]
    if noted:
        lines.extend(["", "## Scientific Notes"])
        for a in noted:
            lines.extend(["", f"### {a.volcano_name}", ""])
            lines.extend(f"- {note}" for note in a.scientific_notes)

    lines.extend([
        "",
        "---",
        "",
        "Statistical assessment only, not an eruption prediction."
        " Official observatory bulletins are authoritative.",
        "",
    ])

    with open(output_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))

    return output_path
