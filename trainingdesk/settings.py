import os
from dotenv import load_dotenv

# Local dev reads .env; the container runtime injects the same names.
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), "..", ".env"))

# --- database ----------------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL")
MONGO_URI = DATABASE_URL or "mongodb://localhost:27017"
MONGO_DB = os.getenv("MONGO_DB", "jal-training-system")

# --- external integrations ---------------------------------------------------
AIRLINE_API_BASE_URL = os.getenv("AIRLINE_API_BASE_URL", "https://jalvirtual.com/api").rstrip("/")
ADMIN_API_KEY = os.getenv("ADMIN_API_KEY")
DISCORD_WEBHOOK_URL = os.getenv("DISCORD_WEBHOOK_URL")
UPSTREAM_TIMEOUT_S = float(os.getenv("UPSTREAM_TIMEOUT_S", "10"))
USER_AGENT = os.getenv("USER_AGENT", "jal-training-system/1.0")

# --- session tokens ----------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_ALG = os.getenv("JWT_ALG", "HS256")
ACCESS_TOKEN_EXPIRE_MIN = int(os.getenv("ACCESS_TOKEN_EXPIRE_MIN", "60"))

# --- workflow ----------------------------------------------------------------
DEFAULT_MAX_ASSIGNMENTS = int(os.getenv("DEFAULT_MAX_ASSIGNMENTS", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
