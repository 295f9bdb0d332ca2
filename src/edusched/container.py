from __future__ import annotations

from dataclasses import dataclass

from .backend.auth import AuthClient
from .backend.client import BackendClient, BackendConfig
from .backend.storage import StorageClient
from .backend.token_storage import FallbackTokenStorage, FileTokenStorage, MemoryTokenStorage
from .backup.service import BackupService
from .branding.service import BrandingService
from .catalog.mysql_catalog_repository import MySQLCatalogRepository
from .catalog.service import CatalogService
from .database.connection import DatabaseConnection
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    catalog_repo: MySQLCatalogRepository
    settings_repo: MySQLSettingsRepository

    auth_client: AuthClient
    storage_client: StorageClient

    auth_service: AuthService
    user_service: UserService
    catalog_service: CatalogService
    branding_service: BrandingService
    backup_service: BackupService


def build_backend(settings) -> tuple[AuthClient, StorageClient]:
    client = BackendClient(
        BackendConfig(
            url=str(getattr(settings, "BACKEND_URL", "")),
            anon_key=str(getattr(settings, "BACKEND_ANON_KEY", "")),
            service_key=str(getattr(settings, "BACKEND_SERVICE_KEY", "")),
            storage_bucket=str(getattr(settings, "STORAGE_BUCKET", "assets")),
        )
    )
    token_storage = FallbackTokenStorage(
        FileTokenStorage(
            getattr(settings, "TOKEN_STORE_PATH", "instance/auth_tokens.json"),
            max_bytes=int(getattr(settings, "TOKEN_STORE_MAX_BYTES", 5 * 1024 * 1024)),
        ),
        MemoryTokenStorage(),
    )
    auth = AuthClient(client, token_storage, persist_session=True, auto_refresh_token=True)
    return auth, StorageClient(client)


def build_container(*, settings) -> Container:
    """Wire repositories, hosted-service clients and services from a settings module."""
    conn = DatabaseConnection.from_dict(dict(settings.DB_CONFIG))

    users_repo = MySQLUserRepository(conn)
    catalog_repo = MySQLCatalogRepository(conn)
    settings_repo = MySQLSettingsRepository(conn)

    auth_client, storage_client = build_backend(settings)

    domains = dict(
        corporate_domain=str(getattr(settings, "CORPORATE_EMAIL_DOMAIN", "fiemg.com.br")),
        institutional_domain=str(getattr(settings, "INSTITUTIONAL_EMAIL_DOMAIN", "senaimgdocente.com.br")),
    )
    auth_service = AuthService(users_repo, auth_client, storage_client, **domains)
    user_service = UserService(users_repo, auth_client, storage_client, **domains)
    catalog_service = CatalogService(catalog_repo, users_repo)
    branding_service = BrandingService(settings_repo, storage_client)
    backup_service = BackupService(
        users_repo,
        catalog_repo,
        settings_repo,
        branding_service,
        backup_dir=getattr(settings, "BACKUP_DIR", "backups"),
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        catalog_repo=catalog_repo,
        settings_repo=settings_repo,
        auth_client=auth_client,
        storage_client=storage_client,
        auth_service=auth_service,
        user_service=user_service,
        catalog_service=catalog_service,
        branding_service=branding_service,
        backup_service=backup_service,
    )
