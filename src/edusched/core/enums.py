from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Papel do usuário, usado para autorização."""

    SUPERVISION = "SUPERVISION"
    INSTRUCTOR = "INSTRUCTOR"


class UserStatus(str, Enum):
    """Ciclo de vida da conta: pedido de cadastro pendente ou ativo."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"


class BackupFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class BrandingAsset(str, Enum):
    """Named branding slots an organization can customize."""

    LOGO = "logo"
    LOGIN_BACKGROUND = "login_background"
    APP_BACKGROUND = "app_background"
    REPORT_BACKGROUND = "report_background"
    FONT = "font"


class CatalogKind(str, Enum):
    COMPETENCIES = "competencies"
    WORKLOADS = "workloads"
    AREAS = "areas"
    ACTIVITY_CATEGORIES = "activity_categories"
