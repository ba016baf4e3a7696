from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator

from .base import DynamicSecretProvider, ProviderInput
from .hosts import validate_host


class SqlClient(str, enum.Enum):
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MSSQL = "mssql"


DEFAULT_DATABASES = {
    SqlClient.POSTGRES: "postgres",
    SqlClient.MYSQL: "mysql",
    SqlClient.MSSQL: "master",
}

DEFAULT_CREATION_STATEMENTS = {
    SqlClient.POSTGRES: (
        "CREATE USER \"{{username}}\" WITH ENCRYPTED PASSWORD '{{password}}' VALID UNTIL '{{expiration}}';\n"
        "GRANT SELECT ON ALL TABLES IN SCHEMA public TO \"{{username}}\";"
    ),
    SqlClient.MYSQL: (
        "CREATE USER '{{username}}'@'%' IDENTIFIED BY '{{password}}';\n"
        "GRANT SELECT ON *.* TO '{{username}}'@'%';"
    ),
    SqlClient.MSSQL: (
        "CREATE LOGIN [{{username}}] WITH PASSWORD = '{{password}}';\n"
        "CREATE USER [{{username}}] FOR LOGIN [{{username}}];"
    ),
}

DEFAULT_REVOCATION_STATEMENTS = {
    SqlClient.POSTGRES: "REVOKE ALL ON DATABASE \"{{database}}\" FROM \"{{username}}\";\nDROP ROLE IF EXISTS \"{{username}}\";",
    SqlClient.MYSQL: "DROP USER IF EXISTS '{{username}}'@'%';",
    SqlClient.MSSQL: "DROP USER [{{username}}];\nDROP LOGIN [{{username}}];",
}

USERNAME_PLACEHOLDER = "{{username}}"


class SqlDatabaseInput(ProviderInput):
    host: str
    port: int = Field(ge=1, le=65535)
    database: str | None = Field(default=None, min_length=1, max_length=128)
    username: str | None = Field(default=None, min_length=1)
    password: str | None = None
    creation_statement: str | None = None
    revocation_statement: str | None = None
    renew_statement: str | None = None
    ca: str | None = None

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        return validate_host(value)

    @field_validator("creation_statement", "revocation_statement")
    @classmethod
    def _check_statement(cls, value: str | None) -> str | None:
        if value is not None and USERNAME_PLACEHOLDER not in value:
            raise ValueError(f"statement must reference {USERNAME_PLACEHOLDER}")
        return value

    @field_validator("ca")
    @classmethod
    def _check_ca(cls, value: str | None) -> str | None:
        if value and "-----BEGIN CERTIFICATE-----" not in value:
            raise ValueError("ca must be a PEM encoded certificate")
        return value or None


class SqlDatabaseProvider(DynamicSecretProvider):
    """Relational database users (postgres, mysql, mssql)."""

    input_model = SqlDatabaseInput

    def __init__(self, client: SqlClient | str) -> None:
        self.client = SqlClient(client)
        self.type = self.client.value

    def finalize(self, data: dict[str, Any]) -> dict[str, Any]:
        data["database"] = data.get("database") or DEFAULT_DATABASES[self.client]
        data["creation_statement"] = data.get("creation_statement") or DEFAULT_CREATION_STATEMENTS[self.client]
        data["revocation_statement"] = (
            data.get("revocation_statement") or DEFAULT_REVOCATION_STATEMENTS[self.client]
        )
        return data
