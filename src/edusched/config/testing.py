import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "edusched_test"),
}

BACKEND_URL = "http://backend.test"
BACKEND_ANON_KEY = "anon-test-key"
BACKEND_SERVICE_KEY = "service-test-key"
STORAGE_BUCKET = "assets"

CORPORATE_EMAIL_DOMAIN = "fiemg.com.br"
INSTITUTIONAL_EMAIL_DOMAIN = "senaimgdocente.com.br"

TOKEN_STORE_PATH = os.getenv("TOKEN_STORE_PATH", "instance/test_auth_tokens.json")
TOKEN_STORE_MAX_BYTES = 64 * 1024

BACKUP_DIR = os.getenv("BACKUP_DIR", "backups")

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
