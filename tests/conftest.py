from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import pytest

from edusched.backend.auth import AuthSession, AuthUser
from edusched.backup.service import BackupService
from edusched.branding.service import BrandingService
from edusched.catalog.service import CatalogService
from edusched.core.enums import CatalogKind, Role, UserStatus
from edusched.core.exceptions import BackendError
from edusched.users.model import User
from edusched.users.service import AuthService, UserService

CORPORATE = "fiemg.com.br"
INSTITUTIONAL = "senaimgdocente.com.br"


class InMemoryUsers:
    def __init__(self, users=()):
        self._by_id: dict[str, User] = {u.user_id: u for u in users}

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        for u in self._by_id.values():
            if u.username == username:
                return u
        return None

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda u: u.name)

    def create(self, user: User) -> None:
        self._by_id[user.user_id] = user

    def update(self, user: User) -> bool:
        if user.user_id not in self._by_id:
            return False
        self._by_id[user.user_id] = user
        return True

    def set_status(self, user_id: str, status: UserStatus) -> bool:
        u = self._by_id.get(user_id)
        if not u:
            return False
        self._by_id[user_id] = replace(u, status=status)
        return True

    def set_competencies(self, user_id: str, competency_ids) -> None:
        u = self._by_id[user_id]
        self._by_id[user_id] = replace(u, competency_ids=tuple(competency_ids))

    def remove_competency_everywhere(self, competency_id: str) -> int:
        n = 0
        for uid, u in list(self._by_id.items()):
            if competency_id in u.competency_ids:
                self._by_id[uid] = replace(u, competency_ids=tuple(c for c in u.competency_ids if c != competency_id))
                n += 1
        return n

    def touch_last_login(self, user_id: str, when: datetime) -> None:
        u = self._by_id.get(user_id)
        if u:
            self._by_id[user_id] = replace(u, last_login=when)

    def delete_by_id(self, user_id: str) -> bool:
        return self._by_id.pop(user_id, None) is not None

    def replace_all(self, users) -> None:
        self._by_id = {u.user_id: u for u in users}


class InMemoryCatalog:
    def __init__(self):
        self._items: dict[CatalogKind, dict] = {kind: {} for kind in CatalogKind}

    def list(self, kind):
        return list(self._items[kind].values())

    def get(self, kind, item_id):
        return self._items[kind].get(item_id)

    def add(self, kind, item) -> None:
        self._items[kind][item.id] = item

    def update(self, kind, item) -> bool:
        if item.id not in self._items[kind]:
            return False
        self._items[kind][item.id] = item
        return True

    def delete(self, kind, item_id) -> bool:
        return self._items[kind].pop(item_id, None) is not None

    def replace_all(self, kind, items) -> None:
        self._items[kind] = {i.id: i for i in items}


class InMemorySettings:
    def __init__(self):
        self.values: dict[str, Optional[str]] = {}

    def get(self, key):
        return self.values.get(key)

    def get_many(self, keys):
        return {k: self.values.get(k) for k in keys}

    def set(self, key, value) -> None:
        self.values[key] = value

    def set_many(self, values) -> None:
        self.values.update(values)


class FakeAuth:
    """Hosted auth stand-in: accounts keyed by email."""

    def __init__(self):
        self.accounts: dict[str, tuple[str, AuthUser]] = {}
        self.signed_out: list[str] = []
        self.updates: list[tuple[str, dict]] = []
        self.deleted: list[str] = []
        self._next = 0

    def _new_id(self) -> str:
        self._next += 1
        return f"auth-{self._next}"

    def add_account(self, email: str, password: str, metadata=None, *, user_id: Optional[str] = None) -> AuthUser:
        user = AuthUser(id=user_id or self._new_id(), email=email, user_metadata=dict(metadata or {}))
        self.accounts[email] = (password, user)
        return user

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        found = self.accounts.get(email)
        if not found or found[0] != password:
            raise BackendError("Invalid login credentials", status=400)
        return AuthSession(access_token="at", refresh_token="rt", expires_at=2_000_000_000, user=found[1])

    def sign_up(self, email: str, password: str, metadata=None) -> AuthUser:
        if email in self.accounts:
            raise BackendError("User already registered", status=422)
        return self.add_account(email, password, metadata)

    def sign_out(self, user_id: str) -> None:
        self.signed_out.append(user_id)

    def admin_create_user(self, email: str, password: str, metadata=None) -> AuthUser:
        return self.sign_up(email, password, metadata)

    def admin_update_user(self, user_id: str, *, password=None, email=None, metadata=None) -> AuthUser:
        body = {k: v for k, v in (("password", password), ("email", email), ("metadata", metadata)) if v is not None}
        self.updates.append((user_id, body))
        for pw, user in self.accounts.values():
            if user.id == user_id:
                return user
        return AuthUser(id=user_id, email="")

    def admin_delete_user(self, user_id: str) -> None:
        for email, (_, user) in list(self.accounts.items()):
            if user.id == user_id:
                del self.accounts[email]
                self.deleted.append(user_id)
                return
        raise BackendError("User not found", status=404)


class FakeStorage:
    def __init__(self, *, download_content: bytes = b""):
        self.uploads: list[tuple[str, str, bytes]] = []
        self.download_content = download_content
        self.downloaded: list[str] = []

    def upload_to_folder(self, folder, filename, content, *, content_type):
        self.uploads.append((folder, filename, content))
        return f"https://cdn.test/{folder}/{len(self.uploads)}-{filename}"

    def download(self, url, *, max_bytes=None):
        self.downloaded.append(url)
        if max_bytes is not None and len(self.download_content) > max_bytes:
            raise BackendError("Arquivo remoto excede o tamanho máximo permitido")
        return self.download_content


def make_user(user_id: str, username: str, *, role=Role.INSTRUCTOR, status=UserStatus.ACTIVE, **kw) -> User:
    return User(
        user_id=user_id,
        name=kw.pop("name", username.title()),
        username=username,
        role=role,
        status=status,
        email=kw.pop("email", f"{username}@{CORPORATE}"),
        **kw,
    )


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def admin_user():
    return make_user("auth-admin", "admin", role=Role.SUPERVISION, name="Administrador Principal")


@pytest.fixture
def users_repo(admin_user):
    return InMemoryUsers([admin_user])


@pytest.fixture
def catalog_repo():
    return InMemoryCatalog()


@pytest.fixture
def settings_repo():
    return InMemorySettings()


@pytest.fixture
def auth(admin_user):
    fake = FakeAuth()
    fake.add_account(admin_user.email, "admin123", user_id=admin_user.user_id)
    return fake


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def auth_service(users_repo, auth, storage):
    return AuthService(users_repo, auth, storage, corporate_domain=CORPORATE, institutional_domain=INSTITUTIONAL)


@pytest.fixture
def user_service(users_repo, auth, storage):
    return UserService(users_repo, auth, storage, corporate_domain=CORPORATE, institutional_domain=INSTITUTIONAL)


@pytest.fixture
def catalog_service(catalog_repo, users_repo):
    return CatalogService(catalog_repo, users_repo)


@pytest.fixture
def branding_service(settings_repo, storage):
    return BrandingService(settings_repo, storage)


@pytest.fixture
def backup_service(users_repo, catalog_repo, settings_repo, branding_service, tmp_path):
    return BackupService(users_repo, catalog_repo, settings_repo, branding_service, backup_dir=tmp_path / "backups")
