"""Hashing, identifier generation, and canonical text helpers.

Digests are SHA-256 over UTF-8 text, rendered as lowercase hex. Numbers and
timestamps are rendered to text with fixed rules so that a payload built in
any implementation of the TSP-1.0 format hashes to the same digest:

- numbers use the shortest round-trip decimal form, switching to exponent
  notation outside ``1e-7 < |x| < 1e21`` (``0.965``, ``1``, ``1e-7``)
- timestamps are UTC ISO-8601 with millisecond precision and a ``Z`` suffix
  (``2025-06-01T12:00:00.000Z``)
"""
from __future__ import annotations

import datetime
import hashlib
import math
import secrets
from decimal import Decimal

HASH_ALGORITHM = "sha256"
ID_BYTES = 16

# Predecessor hash of the first record in any chain. A SHA-256 hex digest is
# always 64 characters, so this value can never equal a real record hash.
GENESIS_HASH = "0"


def sha256(data: str) -> str:
    """Return the hex SHA-256 digest of *data* encoded as UTF-8."""
    return hashlib.new(HASH_ALGORITHM, data.encode("utf-8")).hexdigest()


def chain_hash(previous_hash: str, payload: str) -> str:
    """Return the digest binding *payload* to its predecessor's hash."""
    return sha256(previous_hash + payload)


def generate_id() -> str:
    """Return a fresh random identifier (32 hex characters)."""
    return secrets.token_hex(ID_BYTES)


def format_number(value: float) -> str:
    """Render *value* as canonical decimal text.

    Integral values drop the fractional part (``1.0`` renders as ``"1"``),
    so ints and floats of equal value produce identical text.

    Parameters
    ----------
    value:
        Any finite or non-finite int or float.

    Returns
    -------
    str
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    parts = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in parts.digits)
    k = len(digits)
    n = int(parts.exponent) + k  # position of the decimal point

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        exp = n - 1
        suffix = f"e{'+' if exp >= 0 else '-'}{abs(exp)}"
        body = digits + suffix if k == 1 else f"{digits[0]}.{digits[1:]}{suffix}"
    return sign + body


def utc_now() -> datetime.datetime:
    """Return the current UTC time truncated to whole milliseconds."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(value: datetime.datetime) -> str:
    """Render *value* as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    utc = value.astimezone(datetime.timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime.datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Raises
    ------
    ValueError
        If *text* is not a valid ISO-8601 timestamp.
    """
    parsed = datetime.datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed.astimezone(datetime.timezone.utc)
