"""Configuration models"""

import os
from urllib.parse import quote

from pydantic import BaseModel, Field, SecretStr


class ConnectionConfig(BaseModel):
    """Where DatabaseOperations connects to. One connection is opened per statement."""

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="postgres", description="Database name")
    user: str = Field(default="postgres", description="Database user")
    password: SecretStr = Field(default=SecretStr("example"))
    dsn: str | None = Field(
        default=None, description="Full DSN, takes precedence over the other fields"
    )

    def dsn_string(self) -> str:
        if self.dsn:
            return self.dsn
        return (
            f"postgresql://{quote(self.user, safe='')}"
            f":{quote(self.password.get_secret_value(), safe='')}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        """Read PGMAPPER_DSN, or the libpq PGHOST/PGPORT/PGDATABASE/PGUSER/PGPASSWORD variables"""
        values: dict[str, str] = {}
        env_map = {
            "PGMAPPER_DSN": "dsn",
            "PGHOST": "host",
            "PGPORT": "port",
            "PGDATABASE": "database",
            "PGUSER": "user",
            "PGPASSWORD": "password",
        }
        for env_name, field_name in env_map.items():
            value = os.environ.get(env_name)
            if value:
                values[field_name] = value
        return cls.model_validate(values)


class MapperConfig(BaseModel):
    """Configuration options for Mapper"""

    default_schema: str | None = Field(
        default=None, description="Schema used for tables bound without one"
    )
    insert_ids: bool = Field(
        default=False,
        description="Include Id fields in INSERT (client-assigned keys)",
    )
    literal_sql: bool = Field(
        default=False,
        description="Send values embedded as SQL literals instead of bound parameters",
    )
