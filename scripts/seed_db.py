"""Seed reference lists and the main supervision account.

The admin login lives in the hosted auth service: it is created there first
(or signed into, when it already exists) and its id is used for the local row.
"""

from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from edusched.config import get_settings_module
from edusched.container import build_backend
from edusched.core.constants import DEFAULT_ADMIN_NAME, DEFAULT_ADMIN_USERNAME
from edusched.core.enums import Role
from edusched.core.exceptions import BackendError
from edusched.database.bootstrap import ensure_catalog_defaults, ensure_default_admin


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_catalog_defaults(db_config)

    email = os.getenv("ADMIN_EMAIL", f"{DEFAULT_ADMIN_USERNAME}@{settings.CORPORATE_EMAIL_DOMAIN}")
    password = os.getenv("ADMIN_PASSWORD", "admin123")
    auth, _ = build_backend(settings)
    metadata = {"name": DEFAULT_ADMIN_NAME, "username": DEFAULT_ADMIN_USERNAME, "role": Role.SUPERVISION.value}
    try:
        admin = auth.admin_create_user(email, password, metadata)
    except BackendError as e:
        print(f"Admin auth account not created ({e}); signing in to reuse it")
        admin = auth.sign_in_with_password(email, password).user

    ensure_default_admin(db_config, user_id=admin.id, email=email)
    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        f" (admin={email})"
    )


if __name__ == "__main__":
    main()
