"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
MIN_PASSWORD_LENGTH = 3

DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_NAME = "Administrador Principal"

# Frequência -> intervalo mínimo em dias entre backups automáticos
BACKUP_INTERVAL_DAYS = {
    "DAILY": 1,
    "WEEKLY": 7,
    "MONTHLY": 30,
}

BACKUP_FILE_PREFIX = "backup_edusched_"

FONT_EXTENSIONS = (".ttf",)
