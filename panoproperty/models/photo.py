"""PropertyPhoto model - one row per panorama in property_photos."""

from typing import Any, Iterable, Optional
from pydantic import BaseModel, Field

from panoproperty.models.property import Panorama


class PropertyPhoto(BaseModel):
    """Stored panorama for a listing."""
    id: Optional[str] = None
    property_id: str = Field(..., description="Property ID (FK)")
    label: str
    url: str
    sort_order: int = Field(..., ge=1, description="1-based position in the submitted order")


def photo_rows(property_id: str, panoramas: list[Panorama]) -> list[dict[str, Any]]:
    """Rows for ``property_photos`` preserving panorama order."""
    return [
        PropertyPhoto(
            property_id=property_id,
            label=panorama.label,
            url=panorama.url,
            sort_order=index + 1,
        ).model_dump(exclude={"id"})
        for index, panorama in enumerate(panoramas)
    ]


def panoramas_by_property(rows: Iterable[dict[str, Any]]) -> dict[str, list[Panorama]]:
    """Group photo rows by property ID, each group ordered by ``sort_order``."""
    grouped: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(str(row["property_id"]), []).append(row)

    return {
        property_id: [
            Panorama(url=row["url"], label=row.get("label") or "")
            for row in sorted(group, key=lambda r: r.get("sort_order") or 0)
        ]
        for property_id, group in grouped.items()
    }
