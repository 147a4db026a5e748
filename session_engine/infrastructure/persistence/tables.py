"""SQLAlchemy Core tables for sessions and session variables.

Table names are configurable (SessionConfig.sessions_table /
variables_table), so tables are built on demand instead of declared as ORM
models with a fixed ``__tablename__``.

Schema:
    sessions(id PK, user_id, user_email, secure_token NULL, ip, created, active)
    session_variables(session_id FK -> sessions.id, name, value,
                      PK(session_id, name))

Note:
    Production schemas are managed by migrations outside this package.
    ``Database.create_all(tables.metadata)`` is for development and tests.
"""

from dataclasses import dataclass

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    Text,
)

SESSION_ID_LENGTH = 128
IP_LENGTH = 45  # Longest textual IPv6 form


@dataclass(frozen=True, slots=True)
class SessionTables:
    """Sessions and variables tables sharing one MetaData."""

    metadata: MetaData
    sessions: Table
    variables: Table


def build_session_tables(
    sessions_table: str = "sessions",
    variables_table: str = "session_variables",
    metadata: MetaData | None = None,
) -> SessionTables:
    """Build Table objects for the configured table names.

    Args:
        sessions_table: Name of the sessions table.
        variables_table: Name of the session variables table.
        metadata: MetaData to attach the tables to (new one if omitted).

    Returns:
        SessionTables bundle.
    """
    metadata = metadata if metadata is not None else MetaData()

    sessions = Table(
        sessions_table,
        metadata,
        Column("id", String(SESSION_ID_LENGTH), primary_key=True),
        Column("user_id", BigInteger, nullable=False),
        Column("user_email", String(255), nullable=False),
        Column("secure_token", String(255), nullable=True),
        Column("ip", String(IP_LENGTH), nullable=True),
        Column("created", DateTime(timezone=True), nullable=False),
        Column("active", DateTime(timezone=True), nullable=False),
        Index(f"ix_{sessions_table}_user_id", "user_id"),
    )

    variables = Table(
        variables_table,
        metadata,
        Column(
            "session_id",
            String(SESSION_ID_LENGTH),
            ForeignKey(f"{sessions_table}.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        Column("name", String(255), primary_key=True),
        Column("value", Text, nullable=True),
    )

    return SessionTables(metadata=metadata, sessions=sessions, variables=variables)
