from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.enums import BrandingAsset


@dataclass(frozen=True)
class AssetSlot:
    setting_key: str
    backup_key: str
    folder: str


ASSET_SLOTS: Dict[BrandingAsset, AssetSlot] = {
    BrandingAsset.LOGO: AssetSlot("custom_logo", "customLogo", "branding"),
    BrandingAsset.LOGIN_BACKGROUND: AssetSlot("custom_login_bg", "customLoginBg", "backgrounds"),
    BrandingAsset.APP_BACKGROUND: AssetSlot("app_background", "appBackground", "backgrounds"),
    BrandingAsset.REPORT_BACKGROUND: AssetSlot("report_background", "reportBackground", "reports"),
    BrandingAsset.FONT: AssetSlot("custom_font", "customFont", "fonts"),
}


@dataclass(frozen=True)
class BrandingSettings:
    """Organization branding. `None` means "use the default"."""

    custom_logo: Optional[str] = None
    custom_login_bg: Optional[str] = None
    app_background: Optional[str] = None
    report_background: Optional[str] = None
    custom_font: Optional[str] = None

    def get(self, asset: BrandingAsset) -> Optional[str]:
        return getattr(self, ASSET_SLOTS[asset].setting_key)

    def to_dict(self) -> Dict[str, Any]:
        return {slot.backup_key: self.get(asset) for asset, slot in ASSET_SLOTS.items()}
