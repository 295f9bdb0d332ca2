import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "edusched_db"),
}

BACKEND_URL = os.getenv("BACKEND_URL", "")
BACKEND_ANON_KEY = os.getenv("BACKEND_ANON_KEY", "")
BACKEND_SERVICE_KEY = os.getenv("BACKEND_SERVICE_KEY", "")
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "assets")

CORPORATE_EMAIL_DOMAIN = os.getenv("CORPORATE_EMAIL_DOMAIN", "fiemg.com.br")
INSTITUTIONAL_EMAIL_DOMAIN = os.getenv("INSTITUTIONAL_EMAIL_DOMAIN", "senaimgdocente.com.br")

TOKEN_STORE_PATH = os.getenv("TOKEN_STORE_PATH", "/var/lib/edusched/auth_tokens.json")
TOKEN_STORE_MAX_BYTES = int(os.getenv("TOKEN_STORE_MAX_BYTES", str(5 * 1024 * 1024)))

BACKUP_DIR = os.getenv("BACKUP_DIR", "/var/lib/edusched/backups")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
