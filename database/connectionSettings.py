"""Connection parameters for the storefront PostgreSQL database."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

HOST_KEY = "SUPABASE_DB_HOST"
PORT_KEY = "SUPABASE_DB_PORT"
NAME_KEY = "SUPABASE_DB_NAME"
USER_KEY = "SUPABASE_DB_USER"
PASSWORD_KEY = "SUPABASE_DB_PASSWORD"

DEFAULT_HOST = "aws-0-eu-central-1.pooler.supabase.com"
DEFAULT_PORT = "6543"
DEFAULT_NAME = "postgres"
DEFAULT_USER = "postgres"


@dataclass(frozen=True)
class ConnectionSettings:
    host: str = DEFAULT_HOST
    port: str = DEFAULT_PORT
    dbname: str = DEFAULT_NAME
    user: str = DEFAULT_USER
    password: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_environment(cls, env: Mapping[str, str]) -> "ConnectionSettings":
        """Resolve each parameter from ``env``, falling back to its default.

        There is no default password: when ``SUPABASE_DB_PASSWORD`` is absent or empty the
        driver is left to find one (``PGPASSWORD``, ``~/.pgpass``).
        """
        password = env.get(PASSWORD_KEY) or None
        if password is None:
            logger.warning("%s is not set; connecting without an explicit password", PASSWORD_KEY)
        return cls(
            host=env.get(HOST_KEY, DEFAULT_HOST),
            port=env.get(PORT_KEY, DEFAULT_PORT),
            dbname=env.get(NAME_KEY, DEFAULT_NAME),
            user=env.get(USER_KEY, DEFAULT_USER),
            password=password,
        )

    def connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "dbname": self.dbname,
            "user": self.user,
        }
        if self.password:
            kwargs["password"] = self.password
        return kwargs

    def describe(self) -> str:
        """Password-free ``user@host:port/dbname`` string for log messages."""
        return f"{self.user}@{self.host}:{self.port}/{self.dbname}"
