"""
Static jurisdiction catalogue.

Jurisdictions are few and rarely change, so they are searched in memory
rather than stored. The first PINNED_COUNT entries are shown when browsing.
"""

from __future__ import annotations

from src.judgefinder.models import Jurisdiction

PINNED_COUNT = 3

JURISDICTIONS: tuple[Jurisdiction, ...] = (
    Jurisdiction(
        id="ca",
        title="California",
        subtitle="State Courts",
        description="State courts across California handling various civil and criminal matters.",
        url="/jurisdictions/california",
        jurisdiction_value="CA",
        display_name="California",
    ),
    Jurisdiction(
        id="federal",
        title="Federal",
        subtitle="Federal Courts",
        description="Federal courts handling federal matters across California districts.",
        url="/jurisdictions/federal",
        jurisdiction_value="F",
        display_name="Federal",
    ),
    Jurisdiction(
        id="los-angeles-county",
        title="Los Angeles County",
        subtitle="County Courts",
        description=(
            "Largest judicial system in California with comprehensive trial and appellate courts."
        ),
        url="/jurisdictions/los-angeles-county",
        jurisdiction_value="CA",
        display_name="Los Angeles County",
    ),
    Jurisdiction(
        id="orange-county",
        title="Orange County",
        subtitle="County Courts",
        description=(
            "Major Southern California jurisdiction serving diverse communities and businesses."
        ),
        url="/jurisdictions/orange-county",
        jurisdiction_value="Orange County, CA",
        display_name="Orange County",
    ),
    Jurisdiction(
        id="san-diego-county",
        title="San Diego County",
        subtitle="County Courts",
        description=(
            "Southern California coastal jurisdiction with federal and state court systems."
        ),
        url="/jurisdictions/san-diego-county",
        jurisdiction_value="CA",
        display_name="San Diego County",
    ),
    Jurisdiction(
        id="san-francisco-county",
        title="San Francisco County",
        subtitle="County Courts",
        description="Metropolitan jurisdiction with specialized business and technology courts.",
        url="/jurisdictions/san-francisco-county",
        jurisdiction_value="CA",
        display_name="San Francisco County",
    ),
    Jurisdiction(
        id="santa-clara-county",
        title="Santa Clara County",
        subtitle="County Courts",
        description=(
            "Silicon Valley jurisdiction handling technology and intellectual property cases."
        ),
        url="/jurisdictions/santa-clara-county",
        jurisdiction_value="CA",
        display_name="Santa Clara County",
    ),
    Jurisdiction(
        id="alameda-county",
        title="Alameda County",
        subtitle="County Courts",
        description="Bay Area jurisdiction with diverse civil and criminal caseloads.",
        url="/jurisdictions/alameda-county",
        jurisdiction_value="CA",
        display_name="Alameda County",
    ),
)


def pinned() -> tuple[Jurisdiction, ...]:
    return JURISDICTIONS[:PINNED_COUNT]


def matching(query: str) -> list[Jurisdiction]:
    """Jurisdictions whose title, display name or description contains ``query``."""
    needle = query.casefold()
    return [
        j
        for j in JURISDICTIONS
        if needle in j.title.casefold()
        or needle in j.display_name.casefold()
        or needle in j.description.casefold()
    ]
