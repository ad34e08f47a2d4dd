import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "clubhub_test"),
}

JWT_SECRET = "test-jwt-secret"
JWT_EXPIRES_MINUTES = 60

QR_CODE_SECRET = "test-qr-secret"
QR_VALIDITY_HOURS = 24

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
