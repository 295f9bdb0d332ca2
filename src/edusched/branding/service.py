from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import urlparse

from ..backend.storage import StorageClient
from ..common.uploads import Upload
from ..common.urls import normalize_asset_url
from ..common.validators import require_extension, require_max_size
from ..core.constants import FONT_EXTENSIONS, MAX_UPLOAD_BYTES
from ..core.enums import BrandingAsset, Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..settings.repository import SettingsRepository
from .model import ASSET_SLOTS, BrandingSettings

logger = logging.getLogger(__name__)


def parse_asset(value: str) -> BrandingAsset:
    try:
        return BrandingAsset(value)
    except ValueError:
        raise ValidationError("Item de personalização inválido")


class BrandingService:
    """Logo, backgrounds and report font of the organization."""

    def __init__(self, settings: SettingsRepository, storage: StorageClient):
        self._settings = settings
        self._storage = storage

    def get(self) -> BrandingSettings:
        keys = [slot.setting_key for slot in ASSET_SLOTS.values()]
        values = self._settings.get_many(keys)
        return BrandingSettings(**{k: (values.get(k) or None) for k in keys})

    def _save(self, asset: BrandingAsset, value: Optional[str]) -> BrandingSettings:
        self._settings.set(ASSET_SLOTS[asset].setting_key, value)
        return self.get()

    def upload_asset(self, *, current_role: Role, asset: BrandingAsset, upload: Upload) -> BrandingSettings:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        if asset == BrandingAsset.FONT:
            require_extension(upload.filename, "Fonte", FONT_EXTENSIONS)
        require_max_size(upload.size, "Arquivo", MAX_UPLOAD_BYTES)

        url = self._storage.upload_to_folder(
            ASSET_SLOTS[asset].folder, upload.filename, upload.content, content_type=upload.content_type
        )
        logger.info("Branding asset %s uploaded: %s", asset.value, url)
        return self._save(asset, url)

    def set_asset_url(self, *, current_role: Role, asset: BrandingAsset, url: str) -> BrandingSettings:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        return self._save(asset, normalize_asset_url(url) or None)

    def set_font_from_url(self, *, current_role: Role, url: str) -> BrandingSettings:
        """Download a font from a (public) link and store it like an uploaded file."""
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        url = normalize_asset_url(url)
        if not url:
            raise ValidationError("Informe o link da fonte")

        content = self._storage.download(url, max_bytes=MAX_UPLOAD_BYTES)
        filename = urlparse(url).path.rsplit("/", 1)[-1] or "font.ttf"
        if not filename.lower().endswith(FONT_EXTENSIONS):
            filename = "font.ttf"
        upload = Upload(filename=filename, content=content, content_type="font/ttf")
        return self.upload_asset(current_role=current_role, asset=BrandingAsset.FONT, upload=upload)

    def reset_asset(self, *, current_role: Role, asset: BrandingAsset) -> BrandingSettings:
        if current_role != Role.SUPERVISION:
            raise AuthorizationError("Você não tem permissão para esta ação")
        return self._save(asset, None)

    def replace_all(self, values: Dict[BrandingAsset, Optional[str]]) -> None:
        """Overwrite the given slots (backup restore)."""
        self._settings.set_many({ASSET_SLOTS[a].setting_key: v for a, v in values.items()})
