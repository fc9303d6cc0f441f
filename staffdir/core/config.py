"""
Configuration for the staff directory.
Environment variables are the single point of control; a local .env file is
loaded first when present.
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv(override=False)

# Store selection: auto|sqlite|local|supabase
STORE_BACKEND = os.getenv("STORE_BACKEND", "auto").lower()
VALID_BACKENDS = ["auto", "sqlite", "local", "supabase"]

# Local storage paths
DB_PATH = os.getenv("DB_PATH", "./data/employees.db")
KV_PATH = os.getenv("KV_PATH", "./data/employees.json")

# Hosted database
EMPLOYEES_TABLE = os.getenv("EMPLOYEES_TABLE", "employees")
REALTIME_CHANNEL = os.getenv("REALTIME_CHANNEL", "employees_changes")

# Debug flag enables API docs routes
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Version string
VERSION = "1.0.0"

SUPABASE_SETUP_HINT = (
    "Supabase credentials not found. Please create a .env file with SUPABASE_URL and "
    "SUPABASE_ANON_KEY (run scripts/setup_env.py for a template)."
)


def _getenv(*names: str) -> Optional[str]:
    """Return the first non-blank value among the given variable names."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value.strip():
            return value.strip()
    return None


def get_supabase_url() -> Optional[str]:
    return _getenv("SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL")


def get_supabase_key() -> Optional[str]:
    return _getenv("SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY")


def has_supabase_credentials() -> bool:
    """Check if both hosted database credentials are configured."""
    return bool(get_supabase_url() and get_supabase_key())


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def resolve_backend(backend: Optional[str] = None) -> str:
    """Pick the concrete backend name, detecting the runtime for 'auto'."""
    backend = (backend or os.getenv("STORE_BACKEND", STORE_BACKEND)).lower()
    if backend not in VALID_BACKENDS:
        raise ValueError(f"Invalid STORE_BACKEND: {backend}")
    if backend == "auto":
        return "supabase" if has_supabase_credentials() else "sqlite"
    return backend


def ensure_parent_directory(path: str):
    """Ensure the directory holding a local storage file exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


async def create_record_store(backend: Optional[str] = None):
    """Build the configured record store implementation."""
    from ..util.logging import logger
    from .errors import BackendUnavailable

    backend = resolve_backend(backend)

    if backend == "supabase":
        if not has_supabase_credentials():
            logger.error("Missing Supabase credentials")
            raise BackendUnavailable(SUPABASE_SETUP_HINT)
        from ..stores.supabase_store import SupabaseRecordStore
        store = await SupabaseRecordStore.connect(
            get_supabase_url(),
            get_supabase_key(),
            table=os.getenv("EMPLOYEES_TABLE", EMPLOYEES_TABLE),
        )
    elif backend == "local":
        from ..stores.kv_store import LocalKeyValueStore
        store = LocalKeyValueStore(os.getenv("KV_PATH", KV_PATH))
    else:
        from ..stores.sqlite_store import SQLiteRecordStore
        store = SQLiteRecordStore(os.getenv("DB_PATH", DB_PATH))

    logger.info(f"Record store selected: {store.backend_name}")
    return store


def validate_config() -> List[str]:
    """Validate configuration and return any issues."""
    issues = []

    backend = os.getenv("STORE_BACKEND", STORE_BACKEND).lower()
    if backend not in VALID_BACKENDS:
        issues.append(f"Invalid STORE_BACKEND: {backend}")

    if backend == "supabase" and not has_supabase_credentials():
        issues.append("STORE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_ANON_KEY")

    url = get_supabase_url()
    if url and not url.startswith(("https://", "http://")):
        issues.append(f"SUPABASE_URL must be an http(s) URL: {url}")

    return issues
