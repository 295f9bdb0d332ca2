from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from ..common.time import parse_iso
from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Obs.: objeto de dados puro (sem acesso ao banco). `user_id` é o id da
    conta no serviço de autenticação hospedado.
    """

    user_id: str
    name: str
    username: str
    role: Role
    status: Optional[UserStatus] = UserStatus.ACTIVE
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    area_id: Optional[str] = None
    workload_id: Optional[str] = None
    re: Optional[str] = None
    google_email: Optional[str] = None
    competency_ids: Tuple[str, ...] = field(default_factory=tuple)
    last_login: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        # status ausente conta como ativo
        return self.status is None or self.status == UserStatus.ACTIVE

    @property
    def is_pending(self) -> bool:
        return self.status == UserStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """Wire/backup representation (camelCase keys)."""
        return {
            "id": self.user_id,
            "name": self.name,
            "username": self.username,
            "role": self.role.value,
            "status": self.status.value if self.status else None,
            "email": self.email,
            "phone": self.phone,
            "photoUrl": self.photo_url,
            "competencyIds": list(self.competency_ids),
            "areaId": self.area_id,
            "workloadId": self.workload_id,
            "re": self.re,
            "googleEmail": self.google_email,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        status = data.get("status")
        return cls(
            user_id=str(data["id"]),
            name=str(data.get("name") or ""),
            username=str(data.get("username") or ""),
            role=Role(data.get("role") or Role.INSTRUCTOR.value),
            status=UserStatus(status) if status else None,
            email=data.get("email") or None,
            phone=data.get("phone") or None,
            photo_url=data.get("photoUrl") or None,
            area_id=data.get("areaId") or None,
            workload_id=data.get("workloadId") or None,
            re=data.get("re") or None,
            google_email=data.get("googleEmail") or None,
            competency_ids=tuple(str(c) for c in (data.get("competencyIds") or [])),
            last_login=parse_iso(data.get("lastLogin")),
        )
