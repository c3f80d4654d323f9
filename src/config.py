import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "dealer_panel")

# Keycloak
KEYCLOAK_URL = os.getenv("KEYCLOAK_URL")
KEYCLOAK_REALM = os.getenv("KEYCLOAK_REALM")

# Client side
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

# Upper bound (seconds) a permission fetch or route check may take before the
# client falls back to "no permissions".
PERMISSION_FETCH_TIMEOUT = float(os.getenv("PERMISSION_FETCH_TIMEOUT", "10"))

# When true "Admin" is treated exactly like "Super Admin". When false "Super Admin"
# is a strict superset and "Admin" resolves to its stored set or the legacy default.
ADMIN_EQUALS_SUPER_ADMIN = _env_bool("ADMIN_EQUALS_SUPER_ADMIN", False)

# Refuse to delete the role the acting administrator currently holds.
PREVENT_SELF_ROLE_DELETE = _env_bool("PREVENT_SELF_ROLE_DELETE", True)

LOG_FILE = os.getenv("LOG_FILE", "api.log")
