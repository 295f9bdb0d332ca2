from __future__ import annotations

import json
from datetime import timedelta

import pytest

from edusched.backup.model import BackupSettings
from edusched.backup.service import backup_due, backup_filename
from edusched.catalog.model import CatalogItem
from edusched.core.enums import BackupFrequency, BrandingAsset, CatalogKind, Role
from edusched.core.exceptions import AuthorizationError, ValidationError

from .conftest import make_user


def _settings(fixed_now, *, days_ago=None, frequency=BackupFrequency.WEEKLY, email="backup@escola.test", auto=True):
    last = (fixed_now - days_ago).isoformat() if days_ago is not None else None
    return BackupSettings(auto_backup=auto, email=email, frequency=frequency, last_backup_date=last)


def test_backup_due_schedule(fixed_now):
    assert not backup_due(_settings(fixed_now, auto=False), fixed_now)
    assert not backup_due(_settings(fixed_now, email=""), fixed_now)
    assert backup_due(_settings(fixed_now), fixed_now)
    assert not backup_due(_settings(fixed_now, days_ago=timedelta(days=6)), fixed_now)
    assert backup_due(_settings(fixed_now, days_ago=timedelta(days=7)), fixed_now)
    assert backup_due(_settings(fixed_now, days_ago=timedelta(hours=12), frequency=BackupFrequency.DAILY), fixed_now)
    assert not backup_due(_settings(fixed_now, days_ago=timedelta(days=29), frequency=BackupFrequency.MONTHLY), fixed_now)


def test_backup_filename(fixed_now):
    assert backup_filename(fixed_now) == "backup_edusched_2026-03-02.json"


def test_export_contains_every_section(backup_service, catalog_repo, branding_service, fixed_now):
    catalog_repo.add(CatalogKind.AREAS, CatalogItem("a1", "Informática", color="#3b82f6"))
    branding_service.set_asset_url(current_role=Role.SUPERVISION, asset=BrandingAsset.LOGO, url="https://x/logo.png")

    filename, text = backup_service.export_json(now=fixed_now)
    payload = json.loads(text)

    assert filename == "backup_edusched_2026-03-02.json"
    assert set(payload) == {
        "users",
        "areas",
        "workloads",
        "technicalCompetencies",
        "activityCategories",
        "customLogo",
        "customLoginBg",
        "appBackground",
        "reportBackground",
        "customFont",
        "backupSettings",
        "exportedAt",
    }
    assert payload["users"][0]["username"] == "admin"
    assert payload["areas"] == [{"id": "a1", "name": "Informática", "color": "#3b82f6"}]
    assert payload["customLogo"] == "https://x/logo.png"
    assert payload["exportedAt"] == fixed_now.isoformat()


def test_import_rejects_unreadable_json(backup_service):
    with pytest.raises(ValidationError) as e:
        backup_service.import_json(current_role=Role.SUPERVISION, text="{not json", confirm=True)
    assert "formato JSON" in str(e.value)


@pytest.mark.parametrize("text", ['{"areas": []}', '{"users": {}}', "[]", '{"users": [{"name": "sem id"}]}'])
def test_import_rejects_invalid_backup(backup_service, text):
    with pytest.raises(ValidationError) as e:
        backup_service.import_json(current_role=Role.SUPERVISION, text=text, confirm=True)
    assert "inválido" in str(e.value)


def test_import_requires_supervision(backup_service):
    with pytest.raises(AuthorizationError):
        backup_service.import_json(current_role=Role.INSTRUCTOR, text='{"users": []}', confirm=True)


def test_import_without_confirm_is_a_preview(backup_service, users_repo):
    text = json.dumps({"users": [make_user("u9", "novo").to_dict()], "areas": [], "events": []})

    summary = backup_service.import_json(current_role=Role.SUPERVISION, text=text, confirm=False)

    assert not summary.applied
    assert summary.sections == ["users", "areas"]
    assert summary.ignored == ["events"]
    assert users_repo.get_by_id("u9") is None


def test_import_replaces_present_sections_only(backup_service, users_repo, catalog_repo, settings_repo):
    catalog_repo.add(CatalogKind.AREAS, CatalogItem("a1", "Informática"))
    catalog_repo.add(CatalogKind.WORKLOADS, CatalogItem("w1", "20 Horas Semanais"))
    users_repo.create(make_user("u1", "joao"))
    data = {
        "users": [make_user("u9", "novo", competency_ids=("c1",)).to_dict()],
        "areas": [],
        "workloads": None,
        "appBackground": "https://x/bg.png",
        "backupSettings": {"autoBackup": True, "email": "b@escola.test", "frequency": "DAILY"},
    }

    summary = backup_service.import_json(current_role=Role.SUPERVISION, text=json.dumps(data), confirm=True)

    assert summary.applied
    assert users_repo.get_by_id("u1") is None
    assert users_repo.get_by_id("u9").competency_ids == ("c1",)
    # the main admin survives a backup that does not list it
    assert users_repo.get_by_username("admin") is not None
    assert summary.user_count == 2
    assert catalog_repo.list(CatalogKind.AREAS) == []
    assert [i.id for i in catalog_repo.list(CatalogKind.WORKLOADS)] == ["w1"]
    assert settings_repo.values["app_background"] == "https://x/bg.png"
    assert backup_service.get_settings().frequency == BackupFrequency.DAILY


def test_import_without_any_admin_row_still_applies(backup_service, users_repo, caplog):
    users_repo.delete_by_id("auth-admin")
    text = json.dumps({"users": [make_user("u9", "novo").to_dict()]})

    with caplog.at_level("WARNING", logger="edusched.backup.service"):
        summary = backup_service.import_json(current_role=Role.SUPERVISION, text=text, confirm=True)

    assert summary.applied
    assert summary.user_count == 1
    assert [u.user_id for u in users_repo.list_all()] == ["u9"]
    assert "seed_db.py" in caplog.text


def test_update_settings_validation(backup_service):
    with pytest.raises(ValidationError):
        backup_service.update_settings(current_role=Role.SUPERVISION, auto_backup=True, email=" ", frequency="WEEKLY")
    with pytest.raises(ValidationError):
        backup_service.update_settings(current_role=Role.SUPERVISION, auto_backup=False, email="", frequency="HOURLY")

    settings = backup_service.update_settings(
        current_role=Role.SUPERVISION, auto_backup=True, email="b@escola.test", frequency="MONTHLY"
    )
    assert backup_service.get_settings() == settings


def test_unreadable_stored_settings_fall_back_to_defaults(backup_service, settings_repo):
    settings_repo.values["backup_settings"] = "{broken"
    assert backup_service.get_settings() == BackupSettings()


def test_auto_backup_writes_file_once_per_interval(backup_service, fixed_now, tmp_path):
    assert backup_service.run_auto_backup(now=fixed_now) is None

    backup_service.update_settings(
        current_role=Role.SUPERVISION, auto_backup=True, email="b@escola.test", frequency="WEEKLY"
    )
    out = backup_service.run_auto_backup(now=fixed_now)

    assert out == tmp_path / "backups" / "backup_edusched_2026-03-02.json"
    assert json.loads(out.read_text(encoding="utf-8"))["users"][0]["username"] == "admin"
    assert backup_service.get_settings().last_backup_date == fixed_now.isoformat()
    assert backup_service.run_auto_backup(now=fixed_now + timedelta(days=1)) is None
