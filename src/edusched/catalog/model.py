from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CatalogItem:
    """One entry of a reference list (competency, workload, area, activity category).

    `color` only applies to areas and `is_system` only to activity categories.
    """

    id: str
    name: str
    color: Optional[str] = None
    is_system: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.color is not None:
            out["color"] = self.color
        if self.is_system:
            out["isSystem"] = True
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogItem":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            color=data.get("color") or None,
            is_system=bool(data.get("isSystem", False)),
        )
