from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.enums import BackupFrequency


@dataclass(frozen=True)
class BackupSettings:
    auto_backup: bool = False
    email: str = ""
    frequency: BackupFrequency = BackupFrequency.WEEKLY
    last_backup_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "autoBackup": self.auto_backup,
            "email": self.email,
            "frequency": self.frequency.value,
            "lastBackupDate": self.last_backup_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BackupSettings":
        return cls(
            auto_backup=bool(data.get("autoBackup", False)),
            email=str(data.get("email") or ""),
            frequency=BackupFrequency(data.get("frequency") or BackupFrequency.WEEKLY.value),
            last_backup_date=data.get("lastBackupDate") or None,
        )


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of a restore. With `applied=False` nothing was written."""

    applied: bool
    sections: List[str] = field(default_factory=list)
    ignored: List[str] = field(default_factory=list)
    user_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": self.applied,
            "sections": list(self.sections),
            "ignored": list(self.ignored),
            "userCount": self.user_count,
        }
