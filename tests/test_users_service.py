from __future__ import annotations

import pytest

from edusched.common.uploads import Upload
from edusched.core.constants import MAX_UPLOAD_BYTES
from edusched.core.enums import Role, UserStatus
from edusched.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from edusched.users.service import Registration, UserForm

from .conftest import make_user


def _registration(**overrides) -> Registration:
    data = dict(
        name="Maria Souza",
        username="maria",
        password="segredo",
        email_prefix="maria.souza",
        phone="31999990000",
        area_id="a1",
        workload_id="w2",
        re="123456",
        photo=Upload(filename="eu.png", content=b"png-bytes", content_type="image/png"),
    )
    data.update(overrides)
    return Registration(**data)


def test_login_derives_corporate_email(auth_service, users_repo, fixed_now):
    s_user = auth_service.login("admin", "admin123", now=fixed_now)

    assert s_user.role == Role.SUPERVISION
    assert s_user.username == "admin"
    assert users_repo.get_by_id("auth-admin").last_login == fixed_now


def test_login_accepts_full_email(auth_service):
    s_user = auth_service.login("admin@fiemg.com.br", "admin123")
    assert s_user.user_id == "auth-admin"


def test_login_wrong_password_raises(auth_service):
    with pytest.raises(AuthenticationError) as e:
        auth_service.login("admin", "nope")
    assert str(e.value).startswith("Falha no login:")


def test_login_requires_fields(auth_service):
    with pytest.raises(ValidationError):
        auth_service.login("  ", "x")
    with pytest.raises(ValidationError):
        auth_service.login("admin", "")


def test_login_without_local_profile_creates_pending_instructor(auth_service, auth, users_repo):
    auth.add_account(
        "marcos@fiemg.com.br",
        "pw",
        {"name": "Marcos", "username": "marcos", "role": "SUPERVISION"},
        user_id="auth-marcos",
    )

    with pytest.raises(AuthenticationError) as e:
        auth_service.login("marcos", "pw")

    created = users_repo.get_by_id("auth-marcos")
    assert "aguardando aprovação" in str(e.value)
    assert created.role == Role.INSTRUCTOR
    assert created.status == UserStatus.PENDING
    assert created.name == "Marcos"
    assert "auth-marcos" in auth.signed_out


def test_orphan_profile_goes_through_approval(auth_service, user_service, auth, users_repo):
    auth.add_account("novo@fiemg.com.br", "pw", {"name": "Novo Instrutor"}, user_id="auth-novo")
    with pytest.raises(AuthenticationError):
        auth_service.login("novo", "pw")

    user_service.approve(current_role=Role.SUPERVISION, user_id="auth-novo")
    s_user = auth_service.login("novo", "pw")

    assert s_user.role == Role.INSTRUCTOR
    assert s_user.username == "novo"


def test_orphan_profile_with_taken_username_gets_suffix(auth_service, auth, users_repo):
    auth.add_account("intruso@fiemg.com.br", "pw", {"username": "admin"}, user_id="auth-intruso")

    with pytest.raises(AuthenticationError):
        auth_service.login("intruso", "pw")

    assert users_repo.get_by_username("admin").user_id == "auth-admin"
    assert users_repo.get_by_id("auth-intruso").username == "admin-auth-int"


def test_pending_user_cannot_login(auth_service, auth, users_repo):
    user = auth_service.register(_registration())

    with pytest.raises(AuthenticationError) as e:
        auth_service.login("maria.souza", "segredo")

    assert "aguardando aprovação" in str(e.value)
    assert user.user_id in auth.signed_out
    assert users_repo.get_by_id(user.user_id).last_login is None


def test_register_creates_pending_profile_with_photo_and_emails(auth_service, auth, storage, users_repo):
    user = auth_service.register(_registration())

    assert user.status == UserStatus.PENDING
    assert user.role == Role.INSTRUCTOR
    assert user.email == "maria.souza@fiemg.com.br"
    assert user.google_email == "123456@senaimgdocente.com.br"
    assert user.photo_url.startswith("https://cdn.test/photos/")
    assert storage.uploads[0][0] == "photos"
    assert users_repo.get_by_id(user.user_id) == user

    meta = auth.accounts["maria.souza@fiemg.com.br"][1].user_metadata
    assert meta["username"] == "maria"
    assert meta["areaId"] == "a1"
    assert meta["role"] == "INSTRUCTOR"


def test_register_accepts_photo_link_instead_of_file(auth_service, storage):
    user = auth_service.register(_registration(photo=None, photo_url="https://img.test/me.jpg"))
    assert user.photo_url == "https://img.test/me.jpg"
    assert storage.uploads == []


@pytest.mark.parametrize("field", ["name", "username", "password", "email_prefix", "phone", "area_id", "workload_id", "re"])
def test_register_requires_every_field(auth_service, field):
    with pytest.raises(ValidationError) as e:
        auth_service.register(_registration(**{field: " "}))
    assert "foto de perfil e o RE" in str(e.value)


def test_register_requires_a_photo(auth_service):
    with pytest.raises(ValidationError):
        auth_service.register(_registration(photo=None, photo_url=""))


def test_register_rejects_large_photo(auth_service):
    big = Upload(filename="big.png", content=b"x" * (MAX_UPLOAD_BYTES + 1), content_type="image/png")
    with pytest.raises(ValidationError):
        auth_service.register(_registration(photo=big))


def test_register_rejects_taken_username(auth_service):
    with pytest.raises(ValidationError):
        auth_service.register(_registration(username="admin"))


def test_register_reports_backend_failure(auth_service, auth):
    auth.add_account("maria.souza@fiemg.com.br", "x")
    with pytest.raises(ValidationError) as e:
        auth_service.register(_registration())
    assert str(e.value).startswith("Erro ao registrar:")


def test_list_partitioned(user_service, users_repo):
    users_repo.create(make_user("u1", "joao"))
    users_repo.create(make_user("u2", "ana", status=UserStatus.PENDING))
    users_repo.create(make_user("u3", "legado", status=None))

    listing = user_service.list_partitioned(current_role=Role.SUPERVISION)

    assert {u.username for u in listing.active} == {"admin", "joao", "legado"}
    assert [u.username for u in listing.pending] == ["ana"]


def test_instructor_can_only_read_own_profile(user_service, users_repo):
    users_repo.create(make_user("u1", "joao"))

    assert user_service.get_user(current_role=Role.INSTRUCTOR, current_user_id="u1", user_id="u1").username == "joao"
    with pytest.raises(AuthorizationError):
        user_service.get_user(current_role=Role.INSTRUCTOR, current_user_id="u1", user_id="auth-admin")


def test_create_user_uses_username_as_initial_password(user_service, auth, users_repo):
    user = user_service.create_user(
        current_role=Role.SUPERVISION,
        form=UserForm(name="Carlos Lima", username="carlos", re="987", competency_ids=("c1",)),
    )

    password, auth_user = auth.accounts["carlos@fiemg.com.br"]
    assert password == "carlos"
    assert user.user_id == auth_user.id
    assert user.google_email == "987@senaimgdocente.com.br"
    assert users_repo.get_by_username("carlos").competency_ids == ("c1",)


def test_create_user_requires_supervision(user_service):
    with pytest.raises(AuthorizationError):
        user_service.create_user(current_role=Role.INSTRUCTOR, form=UserForm(name="X", username="x"))


def test_update_user_rejects_duplicate_username(user_service, users_repo):
    users_repo.create(make_user("u1", "joao"))
    with pytest.raises(ValidationError):
        user_service.update_user(current_role=Role.SUPERVISION, user_id="u1", form=UserForm(name="Joao", username="admin"))


def test_update_user_pushes_metadata(user_service, auth, users_repo):
    users_repo.create(make_user("u1", "joao"))

    updated = user_service.update_user(
        current_role=Role.SUPERVISION,
        user_id="u1",
        form=UserForm(name="João Pedro", username="joao", role=Role.SUPERVISION, area_id="a2"),
    )

    assert updated.role == Role.SUPERVISION
    assert users_repo.get_by_id("u1").name == "João Pedro"
    assert auth.updates[-1][0] == "u1"
    assert auth.updates[-1][1]["metadata"]["areaId"] == "a2"


def test_approve_activates_pending_user(user_service, users_repo):
    users_repo.create(make_user("u2", "ana", status=UserStatus.PENDING))

    user = user_service.approve(current_role=Role.SUPERVISION, user_id="u2")

    assert user.status == UserStatus.ACTIVE
    assert users_repo.get_by_id("u2").is_active


def test_approve_only_pending(user_service):
    with pytest.raises(ValidationError):
        user_service.approve(current_role=Role.SUPERVISION, user_id="auth-admin")


def test_reject_removes_profile_and_auth_account(user_service, auth, users_repo):
    auth.add_account("ana@fiemg.com.br", "pw", user_id="u2")
    users_repo.create(make_user("u2", "ana", status=UserStatus.PENDING))

    user_service.reject(current_role=Role.SUPERVISION, user_id="u2")

    assert users_repo.get_by_id("u2") is None
    assert auth.deleted == ["u2"]


def test_delete_ignores_missing_auth_account(user_service, users_repo):
    users_repo.create(make_user("u1", "joao"))

    user_service.delete_user(current_role=Role.SUPERVISION, current_user_id="auth-admin", user_id="u1")

    assert users_repo.get_by_id("u1") is None


def test_delete_protects_main_admin_and_self(user_service, users_repo):
    users_repo.create(make_user("sup2", "coord", role=Role.SUPERVISION))

    with pytest.raises(ValidationError):
        user_service.delete_user(current_role=Role.SUPERVISION, current_user_id="sup2", user_id="auth-admin")
    with pytest.raises(ValidationError):
        user_service.delete_user(current_role=Role.SUPERVISION, current_user_id="sup2", user_id="sup2")


def test_delete_unknown_user(user_service):
    with pytest.raises(NotFoundError):
        user_service.delete_user(current_role=Role.SUPERVISION, current_user_id="auth-admin", user_id="ghost")


def test_reset_password_min_length(user_service, auth):
    with pytest.raises(ValidationError) as e:
        user_service.reset_password(current_role=Role.SUPERVISION, user_id="auth-admin", new_password="ab")
    assert "pelo menos 3 caracteres" in str(e.value)

    user_service.reset_password(current_role=Role.SUPERVISION, user_id="auth-admin", new_password="abc")
    assert auth.updates[-1] == ("auth-admin", {"password": "abc"})


def test_toggle_competency(user_service, users_repo):
    users_repo.create(make_user("u1", "joao", competency_ids=("c1",)))

    user = user_service.toggle_competency(current_role=Role.SUPERVISION, user_id="u1", competency_id="c2")
    assert user.competency_ids == ("c1", "c2")

    user = user_service.toggle_competency(current_role=Role.SUPERVISION, user_id="u1", competency_id="c1")
    assert users_repo.get_by_id("u1").competency_ids == ("c2",)


def test_toggle_competency_requires_supervision(user_service, users_repo):
    users_repo.create(make_user("u1", "joao"))
    with pytest.raises(AuthorizationError):
        user_service.toggle_competency(current_role=Role.INSTRUCTOR, user_id="u1", competency_id="c2")


def test_set_competencies_dedupes(user_service, users_repo):
    users_repo.create(make_user("u1", "joao"))
    user = user_service.set_competencies(current_role=Role.SUPERVISION, user_id="u1", competency_ids=["c1", "c1", "", "c3"])
    assert user.competency_ids == ("c1", "c3")


def test_upload_photo_own_profile_only(user_service, users_repo, storage):
    users_repo.create(make_user("u1", "joao"))
    photo = Upload(filename="me.jpg", content=b"jpg", content_type="image/jpeg")

    with pytest.raises(AuthorizationError):
        user_service.upload_photo(current_role=Role.INSTRUCTOR, current_user_id="u1", user_id="auth-admin", photo=photo)

    user = user_service.upload_photo(current_role=Role.INSTRUCTOR, current_user_id="u1", user_id="u1", photo=photo)
    assert user.photo_url == users_repo.get_by_id("u1").photo_url
    assert storage.uploads[-1][0] == "photos"


def test_update_without_role_or_status_keeps_current_values(user_service, users_repo):
    users_repo.create(make_user("u2", "ana", status=UserStatus.PENDING))
    users_repo.create(make_user("sup2", "coord", role=Role.SUPERVISION))

    user_service.update_user(current_role=Role.SUPERVISION, user_id="u2", form=UserForm(name="Ana", username="ana"))
    user_service.update_user(
        current_role=Role.SUPERVISION, user_id="sup2", form=UserForm(name="Coord", username="coord")
    )

    assert users_repo.get_by_id("u2").status == UserStatus.PENDING
    assert users_repo.get_by_id("sup2").role == Role.SUPERVISION


def test_create_user_defaults_to_active_instructor(user_service):
    user = user_service.create_user(current_role=Role.SUPERVISION, form=UserForm(name="Bia", username="bia"))
    assert (user.role, user.status) == (Role.INSTRUCTOR, UserStatus.ACTIVE)
