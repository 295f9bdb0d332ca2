from __future__ import annotations

from flask import Flask, request

from ..common.http import current_role, ok, request_data, supervision_required
from ..common.uploads import Upload
from ..core.enums import BrandingAsset
from ..core.exceptions import ValidationError
from ..container import Container
from .service import parse_asset

_UPLOAD_MESSAGES = {
    BrandingAsset.LOGO: "Logo atualizada com sucesso!",
    BrandingAsset.LOGIN_BACKGROUND: "Imagem de fundo atualizada com sucesso!",
    BrandingAsset.APP_BACKGROUND: "Fundo da aplicação atualizado!",
    BrandingAsset.REPORT_BACKGROUND: "Fundo dos relatórios atualizado!",
    BrandingAsset.FONT: "Fonte personalizada carregada com sucesso! Ela será usada nos próximos relatórios.",
}


def register(app: Flask, container: Container) -> None:
    # Público: a tela de login usa logo e fundo antes de existir sessão
    @app.route("/api/branding", endpoint="branding")
    def branding():
        return ok(branding=container.branding_service.get().to_dict())

    @app.route("/api/branding/<asset>", methods=["POST"], endpoint="branding_upload")
    @supervision_required
    def branding_upload(asset: str):
        slot = parse_asset(asset)
        f = request.files.get("file")
        if not f or not f.filename:
            raise ValidationError("Selecione um arquivo")
        settings = container.branding_service.upload_asset(
            current_role=current_role(), asset=slot, upload=Upload.from_file_storage(f)
        )
        return ok(message=_UPLOAD_MESSAGES[slot], branding=settings.to_dict())

    @app.route("/api/branding/<asset>", methods=["PUT"], endpoint="branding_set_url")
    @supervision_required
    def branding_set_url(asset: str):
        slot = parse_asset(asset)
        url = request_data().get("url", "")
        if slot == BrandingAsset.FONT and url:
            settings = container.branding_service.set_font_from_url(current_role=current_role(), url=url)
            return ok(message="Fonte carregada via link com sucesso!", branding=settings.to_dict())
        settings = container.branding_service.set_asset_url(current_role=current_role(), asset=slot, url=url)
        return ok(branding=settings.to_dict())

    @app.route("/api/branding/<asset>", methods=["DELETE"], endpoint="branding_reset")
    @supervision_required
    def branding_reset(asset: str):
        settings = container.branding_service.reset_asset(current_role=current_role(), asset=parse_asset(asset))
        return ok(message="Padrão restaurado.", branding=settings.to_dict())
