"""Session variables service.

Opaque per-session key/value storage (e.g. a post-login redirect target,
a flash message, a pending form). Values are JSON-serialized.

Reads return Result values:
    Success(value)     variable read (value is None when it does not exist)
    Failure(reason)    no usable session id, or the stored value is corrupt

``fetch`` removes a variable only after it was read successfully, so a
corrupt value is left in place for inspection.
"""

import json
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from session_engine.core.result import Failure, Result, Success
from session_engine.domain.entities import SessionRecord
from session_engine.domain.protocols.logger_protocol import LoggerProtocol
from session_engine.domain.protocols.session_store import SessionStore
from session_engine.domain.validators import sid_valid, user_id_valid
from session_engine.domain.value_objects import SessionConfig
from session_engine.infrastructure.security import split_secure_id

INVALID_SESSION_REASON = "Session ID is not valid"


class SessionVariables:
    """Read and write variables bound to a session.

    Args:
        config: Session configuration (single_session decides delete_all scope).
        store: Backing store adapter.
        logger: Structured logger.
    """

    def __init__(
        self,
        *,
        config: SessionConfig,
        store: SessionStore,
        logger: LoggerProtocol,
    ) -> None:
        self._config = config
        self._store = store
        self._logger = logger

    def _db_id(self, record: SessionRecord, action: str, name: object) -> str | None:
        if record.db_id:
            return record.db_id
        if record.id and sid_valid(record.id):
            return split_secure_id(record.id)[0]
        self._logger.error(
            f"Cannot {action} session variable because session ID is not valid",
            variable=str(name),
            user_id=record.user_id,
        )
        return None

    def _decode(self, db_id: str, name: str, raw: str) -> Result[Any, str]:
        try:
            return Success(value=json.loads(raw))
        except (json.JSONDecodeError, TypeError) as e:
            self._logger.warning(
                "Cannot decode session variable", db_id=db_id, variable=name, error=str(e)
            )
            return Failure(error=f"Session variable {name} cannot be decoded")

    def _encode(self, name: str, value: Any) -> str | None:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            self._logger.error(
                "Cannot encode session variable", variable=name, error=e
            )
            return None

    # Reads

    async def get(self, record: SessionRecord, name: str) -> Result[Any, str]:
        """Read one variable."""
        db_id = self._db_id(record, "get", name)
        if db_id is None:
            return Failure(error=INVALID_SESSION_REASON)
        raw = await self._store.get_variable(db_id, name)
        if raw is None:
            return Success(value=None)
        return self._decode(db_id, name, raw)

    async def get_many(
        self, record: SessionRecord, names: Sequence[str]
    ) -> Result[dict[str, Any], str]:
        """Read several variables.

        Missing and corrupt variables are left out of the returned mapping.
        """
        if not names:
            return Success(value={})
        db_id = self._db_id(record, "get", names[0])
        if db_id is None:
            return Failure(error=INVALID_SESSION_REASON)
        stored = await self._store.get_variables(db_id, names)
        values: dict[str, Any] = {}
        for name, raw in stored.items():
            match self._decode(db_id, name, raw):
                case Success(value=value):
                    values[name] = value
                case Failure():
                    pass
        return Success(value=values)

    async def fetch(self, record: SessionRecord, name: str) -> Result[Any, str]:
        """Read one variable and delete it if the read succeeded."""
        result = await self.get(record, name)
        if isinstance(result, Success):
            db_id = self._db_id(record, "delete", name)
            if db_id is not None:
                await self._store.delete_variable(db_id, name)
        return result

    async def fetch_many(
        self, record: SessionRecord, names: Sequence[str]
    ) -> Result[dict[str, Any], str]:
        """Read several variables and delete the ones read successfully."""
        result = await self.get_many(record, names)
        if isinstance(result, Success) and result.value:
            db_id = self._db_id(record, "delete", names[0])
            if db_id is not None:
                await self._store.delete_variables(db_id, list(result.value))
        return result

    # Writes

    async def put(self, record: SessionRecord, name: str, value: Any) -> int:
        """Store one variable. Returns rows written (0 on failure)."""
        db_id = self._db_id(record, "store", name)
        if db_id is None:
            return 0
        encoded = self._encode(name, value)
        if encoded is None:
            return 0
        return await self._store.put_variable(db_id, name, encoded)

    async def put_many(self, record: SessionRecord, values: Mapping[str, Any]) -> int:
        """Store several variables. Returns rows written (0 on failure)."""
        if not values:
            return 0
        db_id = self._db_id(record, "store", next(iter(values)))
        if db_id is None:
            return 0
        encoded: dict[str, str] = {}
        for name, value in values.items():
            item = self._encode(name, value)
            if item is None:
                return 0
            encoded[name] = item
        return await self._store.put_variables(db_id, encoded)

    # Deletes

    async def delete(self, record: SessionRecord, name: str) -> int:
        db_id = self._db_id(record, "delete", name)
        if db_id is None:
            return 0
        return await self._store.delete_variable(db_id, name)

    async def delete_many(self, record: SessionRecord, names: Iterable[str]) -> int:
        names = list(names)
        if not names:
            return 0
        db_id = self._db_id(record, "delete", names[0])
        if db_id is None:
            return 0
        return await self._store.delete_variables(db_id, names)

    async def delete_all(self, record: SessionRecord) -> int:
        """Delete the user's variables (single-session mode) or this session's."""
        if self._config.single_session:
            if record.user_id is None:
                self._logger.error(
                    "Cannot delete session variables because user ID is not valid",
                    user_email=record.user_email,
                )
                return 0
            return await self.delete_user_vars(record.user_id)
        return await self.delete_session_vars(record)

    async def delete_user_vars(self, user_id: int) -> int:
        """Delete the variables of all sessions of a user."""
        if not user_id_valid(user_id):
            self._logger.error(
                "Cannot delete session variables because user ID is not valid",
                user_id=user_id,
            )
            return 0
        return await self._store.delete_user_variables(user_id)

    async def delete_session_vars(self, record: SessionRecord) -> int:
        """Delete all variables of one session."""
        db_id = self._db_id(record, "delete", "*")
        if db_id is None:
            return 0
        return await self._store.delete_session_variables(db_id)
