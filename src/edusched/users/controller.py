from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

from flask import Flask, request, session

from ..common.http import (
    as_bool,
    current_role,
    current_user_id,
    error,
    login_required,
    ok,
    request_data,
    supervision_required,
)
from ..common.uploads import Upload
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import Role, UserStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .service import Registration, UserForm


def _user_form(data: Dict[str, Any]) -> UserForm:
    try:
        role = Role(data["role"]) if data.get("role") else None
        status = UserStatus(data["status"]) if data.get("status") else None
    except ValueError:
        raise ValidationError("Perfil ou status inválido")
    competencies = data.get("competencyIds") or []
    if isinstance(competencies, str):
        competencies = [c for c in competencies.split(",") if c]
    return UserForm(
        name=data.get("name", ""),
        username=data.get("username", ""),
        role=role,
        status=status,
        email=data.get("email") or "",
        phone=data.get("phone") or "",
        photo_url=data.get("photoUrl") or "",
        area_id=data.get("areaId") or "",
        workload_id=data.get("workloadId") or "",
        re=data.get("re") or "",
        competency_ids=tuple(competencies),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request_data()
        login_value = data.get("login") or data.get("email") or data.get("username") or ""
        s_user = container.auth_service.login(login_value, data.get("password", ""))

        session.clear()
        session.permanent = as_bool(data.get("remember"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["username"] = s_user.username
        session["role"] = s_user.role.value

        return ok(
            message="Login realizado com sucesso!",
            user={"id": s_user.user_id, "name": s_user.name, "role": s_user.role.value, "photoUrl": s_user.photo_url},
        )

    @app.route("/api/auth/register", methods=["POST"], endpoint="register")
    def register_user():
        data = request_data()
        photo = request.files.get("photo")
        form = Registration(
            name=data.get("name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            email_prefix=data.get("emailPrefix", ""),
            phone=data.get("phone", ""),
            area_id=data.get("areaId", ""),
            workload_id=data.get("workloadId", ""),
            re=data.get("re", ""),
            photo=Upload.from_file_storage(photo) if photo and photo.filename else None,
            photo_url=data.get("photoUrl", ""),
        )
        user = container.auth_service.register(form)
        return (
            ok(
                message="Solicitação de cadastro enviada! Verifique seu e-mail para confirmar (se necessário).",
                user=user.to_dict(),
            ),
            201,
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        user_id = session.get("user_id")
        if user_id:
            container.auth_service.logout(str(user_id))
        session.clear()
        return ok(message="Sessão encerrada.")

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        user = container.auth_service.current_user(current_user_id())
        if not user:
            session.clear()
            return error("Sessão inválida. Faça login novamente.", 401)
        return ok(user=user.to_dict())

    @app.route("/api/users", endpoint="list_users")
    @supervision_required
    def list_users():
        listing = container.user_service.list_partitioned(current_role=current_role())
        return ok(
            active=[u.to_dict() for u in listing.active],
            pending=[u.to_dict() for u in listing.pending],
        )

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @supervision_required
    def create_user():
        user = container.user_service.create_user(current_role=current_role(), form=_user_form(request_data()))
        return (
            ok(
                message="Usuário cadastrado com sucesso! A senha inicial é igual ao nome de usuário.",
                user=user.to_dict(),
            ),
            201,
        )

    @app.route("/api/users/<user_id>", endpoint="get_user")
    @login_required
    def get_user(user_id: str):
        user = container.user_service.get_user(
            current_role=current_role(), current_user_id=current_user_id(), user_id=user_id
        )
        return ok(user=user.to_dict())

    @app.route("/api/users/<user_id>", methods=["PUT"], endpoint="update_user")
    @supervision_required
    def update_user(user_id: str):
        user = container.user_service.update_user(
            current_role=current_role(), user_id=user_id, form=_user_form(request_data())
        )
        return ok(message="Usuário atualizado com sucesso!", user=user.to_dict())

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @supervision_required
    def delete_user(user_id: str):
        container.user_service.delete_user(
            current_role=current_role(), current_user_id=current_user_id(), user_id=user_id
        )
        return ok(message="Usuário excluído.")

    @app.route("/api/users/<user_id>/approve", methods=["POST"], endpoint="approve_user")
    @supervision_required
    def approve_user(user_id: str):
        user = container.user_service.approve(current_role=current_role(), user_id=user_id)
        return ok(message=f"Usuário {user.name} aprovado com sucesso!", user=user.to_dict())

    @app.route("/api/users/<user_id>/reject", methods=["POST"], endpoint="reject_user")
    @supervision_required
    def reject_user(user_id: str):
        container.user_service.reject(current_role=current_role(), user_id=user_id)
        return ok(message="Solicitação rejeitada.")

    @app.route("/api/users/<user_id>/password", methods=["POST"], endpoint="reset_password")
    @supervision_required
    def reset_password(user_id: str):
        data = request_data()
        container.user_service.reset_password(
            current_role=current_role(), user_id=user_id, new_password=data.get("password", "")
        )
        return ok(message="Senha alterada com sucesso!")

    @app.route("/api/users/<user_id>/competencies", methods=["PUT"], endpoint="set_competencies")
    @supervision_required
    def set_competencies(user_id: str):
        ids = request_data().get("competencyIds") or []
        if not isinstance(ids, list):
            raise ValidationError("competencyIds deve ser uma lista")
        user = container.user_service.set_competencies(
            current_role=current_role(), user_id=user_id, competency_ids=ids
        )
        return ok(user=user.to_dict())

    @app.route(
        "/api/users/<user_id>/competencies/<competency_id>/toggle",
        methods=["POST"],
        endpoint="toggle_competency",
    )
    @supervision_required
    def toggle_competency(user_id: str, competency_id: str):
        user = container.user_service.toggle_competency(
            current_role=current_role(), user_id=user_id, competency_id=competency_id
        )
        return ok(user=user.to_dict())

    @app.route("/api/users/<user_id>/photo", methods=["POST"], endpoint="upload_photo")
    @login_required
    def upload_photo(user_id: str):
        photo = request.files.get("photo")
        if not photo or not photo.filename:
            raise ValidationError("Selecione uma imagem")
        user = container.user_service.upload_photo(
            current_role=current_role(),
            current_user_id=current_user_id(),
            user_id=user_id,
            photo=Upload.from_file_storage(photo),
        )
        return ok(user=user.to_dict())
