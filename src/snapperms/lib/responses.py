"""Decode snapd JSON response envelopes into snapperms models."""

import json
import re
from datetime import datetime

from snapperms.lib.errors import DecodeError, TransportError
from snapperms.lib.models import (
    Constraints,
    CustomRule,
    Lifespan,
    Outcome,
    Permission,
)

# snapd serialises Go's zero time for rules that never expire
_ZERO_TIME = "0001-01-01T00:00:00Z"

_FRACTION = re.compile(r"\.(\d+)")


def decode_envelope(body: bytes) -> object:
    """Parse a snapd response body and return its ``result`` member.

    Acknowledgement bodies without a result (``{}``) yield None.
    """
    try:
        data = json.loads(body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise DecodeError(f"Invalid JSON in response: {e}") from e

    if not isinstance(data, dict):
        raise DecodeError(f"Expected JSON object, got {type(data).__name__}")

    if data.get("type") == "error":
        result = data.get("result")
        message = result.get("message") if isinstance(result, dict) else None
        raise TransportError(
            message or "snapd returned an error", status=data.get("status-code")
        )

    return data.get("result")


def decode_prompting_enabled(result: object) -> bool:
    """Read result.experimental.apparmor-prompting."""
    experimental = _field(result, "experimental", dict, "result")
    return _field(experimental, "apparmor-prompting", bool, "result.experimental")


def decode_rules(result: object) -> list[CustomRule]:
    if not isinstance(result, list):
        raise DecodeError(f"Expected list of rules, got {type(result).__name__}")
    return [decode_rule(obj) for obj in result]


def decode_rule(obj: object) -> CustomRule:
    """Build a CustomRule from one element of the rules listing."""
    rule_id = _field(obj, "id", str, "rule")
    where = f"rule {rule_id}"

    constraints = _field(obj, "constraints", dict, where)
    path_pattern = _field(constraints, "path-pattern", str, f"{where}.constraints")
    raw_permissions = _field(constraints, "permissions", list, f"{where}.constraints")

    expiration = obj.get("expiration")
    if expiration is not None and not isinstance(expiration, str):
        raise DecodeError(f"{where}: 'expiration' must be str")

    try:
        return CustomRule(
            id=rule_id,
            timestamp=parse_timestamp(_field(obj, "timestamp", str, where)),
            user=_field(obj, "user", int, where),
            snap=_field(obj, "snap", str, where),
            interface=_field(obj, "interface", str, where),
            constraints=Constraints(
                path_pattern=path_pattern,
                permissions=tuple(Permission(p) for p in raw_permissions),
            ),
            outcome=Outcome(_field(obj, "outcome", str, where)),
            lifespan=Lifespan(_field(obj, "lifespan", str, where)),
            expiration=(
                None
                if expiration in (None, "", _ZERO_TIME)
                else parse_timestamp(expiration)
            ),
        )
    except ValueError as e:
        raise DecodeError(f"{where}: {e}") from e


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp, truncating sub-microsecond precision."""
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value)
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as e:
        raise DecodeError(f"Invalid timestamp {value!r}") from e
    if parsed.tzinfo is None:
        raise DecodeError(f"Invalid timestamp {value!r}: missing UTC offset")
    return parsed


def _field(obj: object, key: str, kind: type, where: str):
    if not isinstance(obj, dict):
        raise DecodeError(f"{where}: expected object, got {type(obj).__name__}")
    if key not in obj:
        raise DecodeError(f"{where}: missing '{key}'")
    value = obj[key]
    # bool is an int subclass; a boolean where an int belongs is still wrong
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"{where}: '{key}' must be {kind.__name__}")
    return value
