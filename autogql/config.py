"""
Runtime configuration, read from the environment (and .env).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load .env (default) or a custom file via ENV_FILE
load_dotenv(dotenv_path=os.getenv("ENV_FILE", ".env"), override=False)


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Service settings"""

    registry_dir: str = "registry"
    api_key: str = ""
    max_limit: Optional[int] = 2000
    debug: bool = False
    log_level: str = "INFO"

    # Statement reading back a generated key, e.g. "SELECT MAX({key}) FROM {table}".
    # Needed for drivers whose cursors have no lastrowid (Databricks SQL).
    key_sql: str = ""

    # Databricks SQL warehouse (default backend)
    databricks_host: str = ""
    databricks_http_path: str = ""
    databricks_token: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables"""
        max_limit = int(os.getenv("AUTOGQL_MAX_LIMIT", "2000"))
        return cls(
            registry_dir=os.getenv("AUTOGQL_REGISTRY", "registry"),
            api_key=os.getenv("API_KEY", ""),
            max_limit=max_limit if max_limit > 0 else None,
            debug=_flag("AUTOGQL_DEBUG"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            key_sql=os.getenv("AUTOGQL_KEY_SQL", ""),
            databricks_host=os.getenv("DATABRICKS_SERVER_HOSTNAME", ""),
            databricks_http_path=os.getenv("DATABRICKS_HTTP_PATH", ""),
            databricks_token=os.getenv("DATABRICKS_TOKEN", ""),
        )

    def missing_databricks_env(self):
        return [k for k, v in {
            "DATABRICKS_SERVER_HOSTNAME": self.databricks_host,
            "DATABRICKS_HTTP_PATH": self.databricks_http_path,
            "DATABRICKS_TOKEN": self.databricks_token,
        }.items() if not v]
