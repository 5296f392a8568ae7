"""Static advisory templates keyed by risk category."""

from __future__ import annotations

from volcanic_risk.models import Guidance, RiskCategory, Volcano

PHIVOLCS_SOURCES: tuple[str, ...] = (
    "PHIVOLCS: phivolcs.dost.gov.ph",
    "Local DRRMO hotline",
    "NDRRMC updates",
)

GLOBAL_SOURCES: tuple[str, ...] = ("Smithsonian Global Volcanism Program: volcano.si.edu",)

NATIONAL_AGENCIES: dict[str, str] = {
    "Japan": "Japan Meteorological Agency: jma.go.jp",
    "USA": "USGS Volcano Hazards Program: usgs.gov/programs/VHP",
    "Italy": "INGV: ingv.it",
    "Iceland": "Icelandic Met Office: vedur.is",
    "New Zealand": "GeoNet: geonet.org.nz",
    "Indonesia": "MAGMA Indonesia (PVMBG): magma.esdm.go.id",
    "Philippines": "PHIVOLCS: phivolcs.dost.gov.ph",
}

_TEMPLATES: dict[str, dict[str, object]] = {
    "CRITICAL": {
        "headline": "{name}: CRITICAL - immediate review",
        "action": "Verify emergency plans, know evacuation routes and follow official bulletins closely.",
        "context": "Multiple indicators suggest significantly elevated activity.",
        "preparedness_steps": (
            "Verify the family emergency communication plan",
            "Know exact evacuation routes and assembly points",
            "Prepare a go-bag with 72-hour supplies",
            "Check official bulletins several times a day",
            "Consider voluntary relocation if living in a high-hazard zone",
        ),
        "disclaimers": (
            "This is a statistical assessment, not an eruption prediction",
            "Volcanic systems can change rapidly in either direction",
            "Official observatory bulletins are the authoritative source",
            "Probability estimates carry significant uncertainty",
        ),
    },
    "VERY_HIGH": {
        "headline": "{name}: very high - heightened awareness",
        "action": "Review and update emergency preparedness. Monitor official bulletins.",
        "context": "Statistical models indicate a significantly elevated probability.",
        "preparedness_steps": (
            "Review the family emergency plan",
            "Check emergency kit supplies",
            "Know evacuation centre locations",
            "Follow official bulletins daily",
        ),
        "disclaimers": (
            "Elevated probability does not guarantee an eruption",
            "Models provide statistical guidance, not predictions",
            "Always defer to the official observatory for emergency decisions",
        ),
    },
    "HIGH": {
        "headline": "{name}: high - review preparedness",
        "action": "A good time to review emergency plans and supplies.",
        "context": "Several factors suggest above-average activity.",
        "preparedness_steps": (
            "Ensure the emergency kit is current",
            "Review family meeting points",
            "Know where to get official updates",
        ),
        "disclaimers": (
            "Continue normal activities with awareness",
            "Models have inherent uncertainty",
        ),
    },
    "ELEVATED": {
        "headline": "{name}: elevated - stay informed",
        "action": "Maintain awareness through official channels.",
        "context": "Some indicators are above background levels.",
        "preparedness_steps": (
            "Know how to access official volcano bulletins",
            "Maintain standard emergency supplies",
        ),
        "disclaimers": ("Above-background levels do not indicate imminent activity",),
    },
    "MODERATE": {
        "headline": "{name}: moderate - standard awareness",
        "action": "Standard preparedness for residents of volcanic areas.",
        "context": "Normal conditions with some elevated factors.",
        "preparedness_steps": ("Maintain household emergency preparedness",),
        "disclaimers": ("Living near volcanoes requires baseline awareness",),
    },
    "LOW": {
        "headline": "{name}: low",
        "action": "No specific action required.",
        "context": "Minimal indicators detected.",
        "preparedness_steps": (),
        "disclaimers": ("Conditions can change; periodic awareness is prudent",),
    },
    "BACKGROUND": {
        "headline": "{name}: background activity",
        "action": "General awareness is sufficient.",
        "context": "No significant indicators.",
        "preparedness_steps": (),
        "disclaimers": (),
    },
}


def monitoring_sources(volcano: Volcano) -> tuple[str, ...]:
    """Official sources to follow for *volcano*."""
    if volcano.kind == "philippine":
        return PHIVOLCS_SOURCES
    agency = NATIONAL_AGENCIES.get(volcano.country)
    return (agency, *GLOBAL_SOURCES) if agency else GLOBAL_SOURCES


def build_guidance(
    category: RiskCategory,
    volcano: Volcano,
    key_indicators: list[str] | tuple[str, ...] = (),
) -> Guidance:
    template = _TEMPLATES.get(category, _TEMPLATES["BACKGROUND"])
    return Guidance(
        headline=str(template["headline"]).format(name=volcano.name),
        action=str(template["action"]),
        context=str(template["context"]),
        preparedness_steps=tuple(template["preparedness_steps"]),  # type: ignore[arg-type]
        monitoring_sources=monitoring_sources(volcano),
        disclaimers=tuple(template["disclaimers"]),  # type: ignore[arg-type]
        key_indicators=tuple(key_indicators),
    )
