from __future__ import annotations

import json
import logging
import math
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..branding.model import ASSET_SLOTS
from ..branding.service import BrandingService
from ..catalog.model import CatalogItem
from ..catalog.repository import CatalogRepository
from ..common.time import parse_iso, utcnow
from ..core.constants import BACKUP_FILE_PREFIX, BACKUP_INTERVAL_DAYS, DEFAULT_ADMIN_USERNAME
from ..core.enums import BackupFrequency, CatalogKind, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..settings.repository import SettingsRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import BackupSettings, ImportSummary

logger = logging.getLogger(__name__)

BACKUP_SETTINGS_KEY = "backup_settings"

CATALOG_SECTIONS = {
    "areas": CatalogKind.AREAS,
    "workloads": CatalogKind.WORKLOADS,
    "technicalCompetencies": CatalogKind.COMPETENCIES,
    "activityCategories": CatalogKind.ACTIVITY_CATEGORIES,
}

INVALID_BACKUP = "Arquivo de backup inválido ou corrompido."


def backup_due(settings: BackupSettings, now: datetime) -> bool:
    """Auto backup is due when enabled with an email and the interval has elapsed."""
    if not settings.auto_backup or not settings.email:
        return False
    last = parse_iso(settings.last_backup_date)
    if last is None:
        return True
    diff_days = math.ceil(abs((now - last).total_seconds()) / 86400)
    return diff_days >= BACKUP_INTERVAL_DAYS[settings.frequency.value]


def backup_filename(now: datetime) -> str:
    return f"{BACKUP_FILE_PREFIX}{now.date().isoformat()}.json"


class BackupService:
    """Whole-dataset JSON export/import plus scheduled backups."""

    def __init__(
        self,
        users: UserRepository,
        catalog: CatalogRepository,
        settings: SettingsRepository,
        branding: BrandingService,
        *,
        backup_dir: str | Path,
    ):
        self._users = users
        self._catalog = catalog
        self._settings = settings
        self._branding = branding
        self._backup_dir = Path(backup_dir)

    # --- settings ---

    def get_settings(self) -> BackupSettings:
        raw = self._settings.get(BACKUP_SETTINGS_KEY)
        if not raw:
            return BackupSettings()
        try:
            return BackupSettings.from_dict(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.warning("Stored backup settings unreadable, using defaults: %s", e)
            return BackupSettings()

    def _save_settings(self, settings: BackupSettings) -> None:
        self._settings.set(BACKUP_SETTINGS_KEY, json.dumps(settings.to_dict()))

    def update_settings(
        self, *, current_role: Role, auto_backup: bool, email: str, frequency: str
    ) -> BackupSettings:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        try:
            freq = BackupFrequency(frequency)
        except ValueError:
            raise ValidationError("Frequência de backup inválida")
        email = (email or "").strip()
        if auto_backup and not email:
            raise ValidationError("Informe o e-mail para o backup automático")

        settings = replace(self.get_settings(), auto_backup=bool(auto_backup), email=email, frequency=freq)
        self._save_settings(settings)
        return settings

    # --- export ---

    def export_payload(self, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or utcnow()
        payload: Dict[str, Any] = {"users": [u.to_dict() for u in self._users.list_all()]}
        for key, kind in CATALOG_SECTIONS.items():
            payload[key] = [i.to_dict() for i in self._catalog.list(kind)]
        payload.update(self._branding.get().to_dict())
        payload["backupSettings"] = self.get_settings().to_dict()
        payload["exportedAt"] = now.isoformat()
        return payload

    def export_json(self, *, now: Optional[datetime] = None) -> Tuple[str, str]:
        now = now or utcnow()
        text = json.dumps(self.export_payload(now=now), indent=2, ensure_ascii=False)
        return backup_filename(now), text

    def write_backup(self, *, now: Optional[datetime] = None) -> Path:
        filename, text = self.export_json(now=now)
        self._backup_dir.mkdir(parents=True, exist_ok=True)
        out = self._backup_dir / filename
        out.write_text(text, encoding="utf-8")
        return out

    def run_auto_backup(self, *, now: Optional[datetime] = None) -> Optional[Path]:
        now = now or utcnow()
        settings = self.get_settings()
        if not backup_due(settings, now):
            return None

        logger.info("Starting automatic backup for %s", settings.email)
        out = self.write_backup(now=now)
        self._save_settings(replace(settings, last_backup_date=now.isoformat()))
        logger.info("Automatic backup written to %s", out)
        return out

    # --- import ---

    def import_json(self, *, current_role: Role, text: str, confirm: bool) -> ImportSummary:
        """Replace current data with a backup file.

        Every section present (non-null) replaces the current one wholesale;
        without `confirm` only the preview is returned.
        """
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        try:
            data = json.loads(text)
        except ValueError:
            raise ValidationError("Erro ao ler o arquivo. Verifique o formato JSON.")
        if not isinstance(data, dict) or not isinstance(data.get("users"), list):
            raise ValidationError(INVALID_BACKUP)

        try:
            users = [User.from_dict(u) for u in data["users"]]
            catalogs = {
                kind: [CatalogItem.from_dict(i) for i in data[key]]
                for key, kind in CATALOG_SECTIONS.items()
                if isinstance(data.get(key), list)
            }
            backup_settings = (
                BackupSettings.from_dict(data["backupSettings"]) if data.get("backupSettings") else None
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Rejected backup file: %s", e)
            raise ValidationError(INVALID_BACKUP)

        branding = {asset: data[slot.backup_key] for asset, slot in ASSET_SLOTS.items() if data.get(slot.backup_key)}

        sections: List[str] = ["users"]
        sections += [key for key, kind in CATALOG_SECTIONS.items() if kind in catalogs]
        sections += [ASSET_SLOTS[a].backup_key for a in branding]
        if backup_settings:
            sections.append("backupSettings")
        known = set(sections) | set(CATALOG_SECTIONS) | {s.backup_key for s in ASSET_SLOTS.values()}
        known |= {"backupSettings", "exportedAt"}
        ignored = sorted(k for k in data if k not in known)

        if not confirm:
            return ImportSummary(applied=False, sections=sections, ignored=ignored, user_count=len(users))

        if not any(u.username == DEFAULT_ADMIN_USERNAME for u in users):
            admin = self._users.get_by_username(DEFAULT_ADMIN_USERNAME)
            if admin:
                users.insert(0, admin)
            else:
                # O id vem do serviço de autenticação; sem ele não há como recriar a linha aqui.
                logger.warning(
                    "Backup has no '%s' user and none exists locally; run scripts/seed_db.py",
                    DEFAULT_ADMIN_USERNAME,
                )

        self._users.replace_all(users)
        for kind, items in catalogs.items():
            self._catalog.replace_all(kind, items)
        if branding:
            self._branding.replace_all(branding)
        if backup_settings:
            self._save_settings(backup_settings)

        if ignored:
            logger.info("Backup sections not handled here were ignored: %s", ", ".join(ignored))
        logger.warning("Backup restored: %s (%d users)", ", ".join(sections), len(users))
        return ImportSummary(applied=True, sections=sections, ignored=ignored, user_count=len(users))
