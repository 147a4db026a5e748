"""Validators package exports.

Exports:
    - Pure helper functions (from functions.py)
    - Session state machine and marking (from session_state.py)
"""

from session_engine.domain.validators.functions import (
    SESSION_ID_PATTERN,
    db_id_part,
    parse_ip,
    plain_ip_str,
    same_address,
    sid_valid,
    timestamp_valid,
    to_v4,
    to_v6,
    user_email_valid,
    user_id_valid,
)
from session_engine.domain.validators.session_state import (
    allow_expired,
    allow_hard_expired,
    allow_soft_expired,
    ip_state,
    is_correct,
    mark_bad,
    mark_good,
    session_state,
)

__all__ = [
    # Helpers
    "SESSION_ID_PATTERN",
    "db_id_part",
    "parse_ip",
    "plain_ip_str",
    "same_address",
    "sid_valid",
    "timestamp_valid",
    "to_v4",
    "to_v6",
    "user_email_valid",
    "user_id_valid",
    # State machine
    "allow_expired",
    "allow_hard_expired",
    "allow_soft_expired",
    "ip_state",
    "is_correct",
    "mark_bad",
    "mark_good",
    "session_state",
]
