from __future__ import annotations

from typing import Iterable

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} é obrigatório")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} deve ter pelo menos {min_len} caracteres.")
    return value


def require_max_size(size: int, field_name: str, limit: int) -> int:
    if size > limit:
        mb = limit // (1024 * 1024)
        raise ValidationError(f"{field_name}: máximo {mb}MB.")
    return size


def require_extension(filename: str, field_name: str, allowed: Iterable[str]) -> str:
    name = (filename or "").strip().lower()
    allowed = tuple(a.lower() for a in allowed)
    if not name.endswith(allowed):
        raise ValidationError(f"{field_name}: envie um arquivo {', '.join(allowed)}")
    return filename
