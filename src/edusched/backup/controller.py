from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.http import as_bool, current_role, ok, request_data, supervision_required
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/backup/export", endpoint="backup_export")
    @supervision_required
    def backup_export():
        filename, text = container.backup_service.export_json()
        return send_file(
            io.BytesIO(text.encode("utf-8")),
            mimetype="application/json",
            as_attachment=True,
            download_name=filename,
        )

    @app.route("/api/backup/import", methods=["POST"], endpoint="backup_import")
    @supervision_required
    def backup_import():
        f = request.files.get("file")
        if f and f.filename:
            try:
                text = f.read().decode("utf-8")
            except UnicodeDecodeError:
                raise ValidationError("Erro ao ler o arquivo. Verifique o formato JSON.")
        else:
            text = request.get_data(as_text=True)
        confirm = as_bool(request.form.get("confirm") or request.args.get("confirm"))

        summary = container.backup_service.import_json(current_role=current_role(), text=text, confirm=confirm)
        if not summary.applied:
            return ok(
                message="ATENÇÃO: Importar um backup substituirá TODOS os dados atuais. Envie confirm=true para continuar.",
                summary=summary.to_dict(),
            )
        return ok(
            message="Backup restaurado com sucesso! As configurações visuais foram aplicadas.",
            summary=summary.to_dict(),
        )

    @app.route("/api/backup/settings", endpoint="backup_settings")
    @supervision_required
    def backup_settings():
        return ok(settings=container.backup_service.get_settings().to_dict())

    @app.route("/api/backup/settings", methods=["PUT"], endpoint="update_backup_settings")
    @supervision_required
    def update_backup_settings():
        data = request_data()
        settings = container.backup_service.update_settings(
            current_role=current_role(),
            auto_backup=as_bool(data.get("autoBackup")),
            email=data.get("email", ""),
            frequency=data.get("frequency", "WEEKLY"),
        )
        return ok(settings=settings.to_dict())
