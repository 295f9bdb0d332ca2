import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "edusched_db"),
}

# Hosted backend (auth + object storage)
BACKEND_URL = os.getenv("BACKEND_URL", "")
BACKEND_ANON_KEY = os.getenv("BACKEND_ANON_KEY", "")
BACKEND_SERVICE_KEY = os.getenv("BACKEND_SERVICE_KEY", "")
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "assets")

CORPORATE_EMAIL_DOMAIN = os.getenv("CORPORATE_EMAIL_DOMAIN", "fiemg.com.br")
INSTITUTIONAL_EMAIL_DOMAIN = os.getenv("INSTITUTIONAL_EMAIL_DOMAIN", "senaimgdocente.com.br")

# Auth token persistence; falls back to in-memory storage when the file is full
TOKEN_STORE_PATH = os.getenv("TOKEN_STORE_PATH", "instance/auth_tokens.json")
TOKEN_STORE_MAX_BYTES = int(os.getenv("TOKEN_STORE_MAX_BYTES", str(5 * 1024 * 1024)))

BACKUP_DIR = os.getenv("BACKUP_DIR", "backups")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed catalog defaults on startup (admin account: scripts/seed_db.py)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
