"""Small pure validation and normalization helpers.

Unlike form validators these never raise: session input comes from
untrusted requests and is classified, not rejected with an exception.
"""

import re
from datetime import datetime
from ipaddress import IPv4Address, IPv6Address, ip_address

from session_engine.domain.entities import IPAddress

SESSION_ID_PATTERN = re.compile(r"^[a-f0-9]{30,128}(-[a-f0-9]{30,128})?$")


def sid_valid(value: object) -> bool:
    """Check session identifier format.

    Example:
        >>> sid_valid("0123456789abcdef0123456789abcdef")
        True
        >>> sid_valid("../../etc/passwd")
        False
    """
    return isinstance(value, str) and SESSION_ID_PATTERN.fullmatch(value) is not None


def db_id_part(sid: str) -> str:
    """Return the db-id half of a public session id (drops the token).

    Example:
        >>> db_id_part("abc-def")
        'abc'
    """
    return sid.partition("-")[0]


def user_id_valid(value: object) -> bool:
    """User ids are positive integers (booleans excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def user_email_valid(value: object) -> bool:
    """E-mail must be a non-blank string."""
    return isinstance(value, str) and bool(value.strip())


def timestamp_valid(value: object) -> bool:
    """Timestamps must be timezone-aware datetimes."""
    return isinstance(value, datetime) and value.tzinfo is not None


def parse_ip(value: object) -> IPAddress | None:
    """Parse an IP address, returning None when not possible.

    Example:
        >>> parse_ip("::ffff:1.2.3.4")
        IPv6Address('::ffff:102:304')
        >>> parse_ip("localhost") is None
        True
    """
    if isinstance(value, IPv4Address | IPv6Address):
        return value
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")
    if not isinstance(value, str):
        return None
    try:
        return ip_address(value.strip())
    except ValueError:
        return None


def to_v6(address: IPAddress) -> IPv6Address:
    """Return the IPv6 form of an address (IPv4 mapped into ::ffff:0:0/96)."""
    if isinstance(address, IPv6Address):
        return address
    return IPv6Address(f"::ffff:{address}")


def to_v4(address: IPAddress) -> IPv4Address | None:
    """Return the IPv4 form of an address, if it has one."""
    if isinstance(address, IPv4Address):
        return address
    return address.ipv4_mapped


def plain_ip_str(address: IPAddress | None) -> str | None:
    """Render an address in its most natural plain form."""
    if address is None:
        return None
    return str(to_v4(address) or address)


def same_address(a: IPAddress, b: IPAddress) -> bool:
    """Compare two addresses by their IPv6 or IPv4 normalized forms."""
    if to_v6(a) == to_v6(b):
        return True
    a4, b4 = to_v4(a), to_v4(b)
    return a4 is not None and a4 == b4
