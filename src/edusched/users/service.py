from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..backend.auth import AuthClient, AuthUser
from ..backend.storage import StorageClient
from ..common.identity import corporate_email, email_local_part, institutional_email
from ..common.time import utcnow
from ..common.uploads import Upload
from ..common.validators import require_max_size, require_min_length, require_non_empty
from ..core.constants import DEFAULT_ADMIN_USERNAME, MAX_UPLOAD_BYTES, MIN_PASSWORD_LENGTH
from ..core.enums import Role, UserStatus
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendError,
    NotFoundError,
    ValidationError,
)
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

PHOTO_FOLDER = "photos"


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: str
    name: str
    username: str
    role: Role
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class Registration:
    """Self-service registration form (instructor sign-up request)."""

    name: str
    username: str
    password: str
    email_prefix: str
    phone: str
    area_id: str
    workload_id: str
    re: str
    photo: Optional[Upload] = None
    photo_url: str = ""


@dataclass(frozen=True)
class UserForm:
    """Admin create/edit form.

    `role` and `status` left as None keep the current values on update
    (INSTRUCTOR and ACTIVE on create).
    """

    name: str
    username: str
    role: Optional[Role] = None
    status: Optional[UserStatus] = None
    email: str = ""
    phone: str = ""
    photo_url: str = ""
    area_id: str = ""
    workload_id: str = ""
    re: str = ""
    competency_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UserListing:
    active: List[User]
    pending: List[User]


def _require_supervision(current_role: Role) -> None:
    if current_role != Role.SUPERVISION:
        raise AuthorizationError("Você não tem permissão para esta ação")


def _user_metadata(user: User) -> dict:
    return {
        "name": user.name,
        "username": user.username,
        "phone": user.phone,
        "areaId": user.area_id,
        "workloadId": user.workload_id,
        "photoUrl": user.photo_url,
        "re": user.re,
        "googleEmail": user.google_email,
        "role": user.role.value,
        "competencyIds": list(user.competency_ids),
    }


def user_from_auth(auth_user: AuthUser, *, status: Optional[UserStatus] = UserStatus.PENDING) -> User:
    """Map a hosted-auth account (and its metadata) onto a local User.

    Metadata is written by the account owner at sign-up, so the role is never
    taken from it: new profiles are instructors until supervision says otherwise.
    """
    meta = auth_user.user_metadata or {}
    local = email_local_part(auth_user.email)
    return User(
        user_id=auth_user.id,
        name=meta.get("name") or local or "User",
        username=meta.get("username") or local or "user",
        role=Role.INSTRUCTOR,
        status=status,
        email=auth_user.email or None,
        phone=meta.get("phone") or None,
        photo_url=meta.get("photoUrl") or None,
        area_id=meta.get("areaId") or None,
        workload_id=meta.get("workloadId") or None,
        re=meta.get("re") or None,
        google_email=meta.get("googleEmail") or None,
        competency_ids=tuple(meta.get("competencyIds") or ()),
    )


class AuthService:
    """Use cases: login, self-registration, logout."""

    def __init__(
        self,
        users: UserRepository,
        auth: AuthClient,
        storage: StorageClient,
        *,
        corporate_domain: str,
        institutional_domain: str,
    ):
        self._users = users
        self._auth = auth
        self._storage = storage
        self._corporate_domain = corporate_domain
        self._institutional_domain = institutional_domain

    def login(self, login: str, password: str, *, now: Optional[datetime] = None) -> SessionUser:
        login = require_non_empty(login, "Usuário ou e-mail")
        if not password:
            raise ValidationError("Senha é obrigatória")

        email = corporate_email(login, self._corporate_domain)
        try:
            session = self._auth.sign_in_with_password(email, password)
        except BackendError as e:
            raise AuthenticationError(f"Falha no login: {e}") from e

        user = self._users.get_by_id(session.user.id)
        if not user:
            # Conta sem perfil local: vira pedido de cadastro pendente
            user = user_from_auth(session.user, status=UserStatus.PENDING)
            if self._users.get_by_username(user.username):
                user = replace(user, username=f"{user.username}-{user.user_id[:8]}")
            self._users.create(user)
            logger.warning("Auth user %s had no local profile; created a pending request", user.user_id)

        if user.is_pending:
            self._auth.sign_out(user.user_id)
            raise AuthenticationError("Cadastro aguardando aprovação da supervisão.")

        self._users.touch_last_login(user.user_id, now or utcnow())
        return SessionUser(
            user_id=user.user_id,
            name=user.name,
            username=user.username,
            role=user.role,
            photo_url=user.photo_url,
        )

    def register(self, form: Registration) -> User:
        required = (
            form.name,
            form.username,
            form.password,
            form.email_prefix,
            form.area_id,
            form.phone,
            form.workload_id,
            form.re,
        )
        has_photo = form.photo is not None or bool((form.photo_url or "").strip())
        if any(not (v or "").strip() for v in required) or not has_photo:
            raise ValidationError("Preencha todos os campos obrigatórios, incluindo a foto de perfil e o RE.")

        username = form.username.strip()
        if self._users.get_by_username(username):
            raise ValidationError("Nome de usuário já está em uso")

        photo_url = (form.photo_url or "").strip()
        if form.photo is not None:
            require_max_size(form.photo.size, "A imagem é muito grande", MAX_UPLOAD_BYTES)
            photo_url = self._storage.upload_to_folder(
                PHOTO_FOLDER, form.photo.filename, form.photo.content, content_type=form.photo.content_type
            )

        email = f"{form.email_prefix.strip()}@{self._corporate_domain}"
        google_email = institutional_email(form.re, self._institutional_domain)
        metadata = {
            "name": form.name.strip(),
            "username": username,
            "phone": form.phone.strip(),
            "areaId": form.area_id,
            "workloadId": form.workload_id,
            "photoUrl": photo_url,
            "re": form.re.strip(),
            "googleEmail": google_email,
            "role": Role.INSTRUCTOR.value,
        }

        try:
            auth_user = self._auth.sign_up(email, form.password, metadata)
        except BackendError as e:
            raise ValidationError(f"Erro ao registrar: {e}") from e

        user = replace(user_from_auth(auth_user, status=UserStatus.PENDING), email=email)
        if not auth_user.user_metadata:
            user = replace(
                user,
                name=metadata["name"],
                username=username,
                phone=metadata["phone"],
                area_id=form.area_id,
                workload_id=form.workload_id,
                photo_url=photo_url,
                re=metadata["re"],
                google_email=google_email,
            )
        try:
            self._users.create(user)
        except Exception:
            # A conta já existe no serviço de autenticação; não há rollback.
            logger.exception("Auth account %s created but local profile write failed", auth_user.id)
            raise
        logger.info("Registration request from %s (%s) is pending approval", username, email)
        return user

    def logout(self, user_id: str) -> None:
        self._auth.sign_out(user_id)

    def current_user(self, user_id: str) -> Optional[User]:
        return self._users.get_by_id(user_id)


class UserService:
    """Use cases: user administration (supervision)."""

    def __init__(
        self,
        users: UserRepository,
        auth: AuthClient,
        storage: StorageClient,
        *,
        corporate_domain: str,
        institutional_domain: str,
    ):
        self._users = users
        self._auth = auth
        self._storage = storage
        self._corporate_domain = corporate_domain
        self._institutional_domain = institutional_domain

    def _get(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Usuário não encontrado")
        return user

    def _check_username_free(self, username: str, *, exclude_id: Optional[str] = None) -> None:
        other = self._users.get_by_username(username)
        if other and other.user_id != exclude_id:
            raise ValidationError("Nome de usuário já está em uso")

    def list_partitioned(self, *, current_role: Role) -> UserListing:
        users = list(self._users.list_all())
        return UserListing(
            active=[u for u in users if u.is_active],
            pending=[u for u in users if u.is_pending],
        )

    def get_user(self, *, current_role: Role, current_user_id: str, user_id: str) -> User:
        if current_role != Role.SUPERVISION and current_user_id != user_id:
            raise AuthorizationError("Você não tem permissão para esta ação")
        return self._get(user_id)

    def create_user(self, *, current_role: Role, form: UserForm) -> User:
        _require_supervision(current_role)
        name = require_non_empty(form.name, "Nome")
        username = require_non_empty(form.username, "Usuário")
        self._check_username_free(username)

        email = (form.email or "").strip() or corporate_email(username, self._corporate_domain)
        draft = User(
            user_id="",
            name=name,
            username=username,
            role=form.role or Role.INSTRUCTOR,
            status=form.status or UserStatus.ACTIVE,
            email=email,
            phone=form.phone.strip() or None,
            photo_url=form.photo_url.strip() or None,
            area_id=form.area_id or None,
            workload_id=form.workload_id or None,
            re=form.re.strip() or None,
            google_email=institutional_email(form.re, self._institutional_domain) or None,
            competency_ids=tuple(form.competency_ids),
        )
        # Senha inicial igual ao nome de usuário
        auth_user = self._auth.admin_create_user(email, username, _user_metadata(draft))
        user = replace(draft, user_id=auth_user.id)
        self._users.create(user)
        logger.info("User %s created by supervision", username)
        return user

    def update_user(self, *, current_role: Role, user_id: str, form: UserForm) -> User:
        _require_supervision(current_role)
        current = self._get(user_id)
        name = require_non_empty(form.name, "Nome")
        username = require_non_empty(form.username, "Usuário")
        self._check_username_free(username, exclude_id=user_id)

        updated = replace(
            current,
            name=name,
            username=username,
            role=form.role or current.role,
            status=form.status or current.status,
            email=(form.email or "").strip() or current.email,
            phone=form.phone.strip() or None,
            photo_url=form.photo_url.strip() or None,
            area_id=form.area_id or None,
            workload_id=form.workload_id or None,
            re=form.re.strip() or None,
            google_email=institutional_email(form.re, self._institutional_domain) or None,
            competency_ids=tuple(form.competency_ids),
        )
        self._auth.admin_update_user(user_id, metadata=_user_metadata(updated))
        if not self._users.update(updated):
            raise NotFoundError("Usuário não encontrado")
        return updated

    def approve(self, *, current_role: Role, user_id: str) -> User:
        _require_supervision(current_role)
        user = self._get(user_id)
        if not user.is_pending:
            raise ValidationError("Usuário não está pendente")
        self._users.set_status(user_id, UserStatus.ACTIVE)
        logger.info("User %s approved", user.username)
        return replace(user, status=UserStatus.ACTIVE)

    def reject(self, *, current_role: Role, user_id: str) -> None:
        _require_supervision(current_role)
        user = self._get(user_id)
        if not user.is_pending:
            raise ValidationError("Usuário não está pendente")
        self._remove(user)

    def delete_user(self, *, current_role: Role, current_user_id: str, user_id: str) -> None:
        _require_supervision(current_role)
        user = self._get(user_id)
        if user.username == DEFAULT_ADMIN_USERNAME:
            raise ValidationError("Não é possível excluir o administrador principal")
        if user.user_id == current_user_id:
            raise ValidationError("Você não pode excluir a própria conta")
        self._remove(user)

    def _remove(self, user: User) -> None:
        if not self._users.delete_by_id(user.user_id):
            raise NotFoundError("Usuário não encontrado")
        try:
            self._auth.admin_delete_user(user.user_id)
        except BackendError as e:
            if e.status != 404:
                raise
            logger.info("Auth account %s was already gone", user.user_id)

    def reset_password(self, *, current_role: Role, user_id: str, new_password: str) -> None:
        _require_supervision(current_role)
        require_min_length(new_password, "A senha", MIN_PASSWORD_LENGTH)
        user = self._get(user_id)
        self._auth.admin_update_user(user_id, password=new_password)
        logger.info("Password reset for %s", user.username)

    def set_competencies(self, *, current_role: Role, user_id: str, competency_ids: Sequence[str]) -> User:
        _require_supervision(current_role)
        user = self._get(user_id)
        ids = tuple(dict.fromkeys(str(c) for c in competency_ids if c))
        self._users.set_competencies(user_id, ids)
        return replace(user, competency_ids=ids)

    def toggle_competency(self, *, current_role: Role, user_id: str, competency_id: str) -> User:
        _require_supervision(current_role)
        user = self._get(user_id)
        ids = list(user.competency_ids)
        if competency_id in ids:
            ids.remove(competency_id)
        else:
            ids.append(competency_id)
        return self.set_competencies(current_role=current_role, user_id=user_id, competency_ids=ids)

    def upload_photo(self, *, current_role: Role, current_user_id: str, user_id: str, photo: Upload) -> User:
        if current_role != Role.SUPERVISION and current_user_id != user_id:
            raise AuthorizationError("Você não tem permissão para esta ação")
        user = self._get(user_id)
        require_max_size(photo.size, "A imagem é muito grande", MAX_UPLOAD_BYTES)
        url = self._storage.upload_to_folder(PHOTO_FOLDER, photo.filename, photo.content, content_type=photo.content_type)
        updated = replace(user, photo_url=url)
        self._users.update(updated)
        return updated
