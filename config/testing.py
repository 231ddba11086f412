import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_admission_test"),
}

JWT_SECRET = "test-jwt-secret"
JWT_ALGORITHM = "HS256"
JWT_TTL_MINUTES = 60

LOG_LEVEL = "DEBUG"
DEBUG = False
TESTING = True

AUTO_INIT_DB = False

REJECT_DUPLICATE_CHECKIN = False
EXPECTED_EMBEDDING_SIZE = 128
