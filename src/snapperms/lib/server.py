"""PermissionServer: translate permission operations into snapd REST calls."""

import json
import logging
from urllib.parse import urlencode

from snapperms.lib.errors import PermissionsError, TransportError
from snapperms.lib.models import BoolValue, Empty, PathSnapshot, PathSnapshots
from snapperms.lib.responses import (
    decode_envelope,
    decode_prompting_enabled,
    decode_rules,
)
from snapperms.lib.transport import Request, Transport

log = logging.getLogger("snapperms.server")

PROMPTING_KEY = "experimental.apparmor-prompting"
# snapd keys conf results by the requested key; asking for the parent yields nested JSON
EXPERIMENTAL_KEY = "experimental"
SYSTEM_CONF_PATH = "/v2/snaps/system/conf"
RULES_PATH = "/v2/interfaces/requests/rules"


class PermissionServer:
    """Stateless front for the snapd prompting settings and rules.

    Every operation performs exactly one request through ``transport``;
    failures surface as TransportError or DecodeError and are never retried.
    """

    def __init__(self, transport: Transport, interface: str = "home") -> None:
        self._transport = transport
        self._interface = interface

    def enable_app_permissions(self) -> Empty:
        return self._set_prompting(True)

    def disable_app_permissions(self) -> Empty:
        return self._set_prompting(False)

    def is_app_permissions_enabled(self) -> BoolValue:
        path = f"{SYSTEM_CONF_PATH}?{urlencode({'keys': EXPERIMENTAL_KEY})}"
        result = self._call(Request("GET", path))
        return BoolValue(value=decode_prompting_enabled(result))

    def are_custom_rules_applied(self) -> BoolValue:
        rules = decode_rules(self._call(Request("GET", self._rules_path())))
        return BoolValue(value=len(rules) > 0)

    def list_personal_folders_permissions(self) -> PathSnapshots:
        rules = decode_rules(self._call(Request("GET", self._rules_path())))
        return PathSnapshots(pathsnaps=[PathSnapshot.from_rule(r) for r in rules])

    def remove_app_permission(self, snap: str) -> Empty:
        """Remove every rule snapd holds for ``snap`` on this interface."""
        if not snap:
            raise ValueError("snap must not be empty")
        body = {
            "action": "remove",
            "selector": {"snap": snap, "interface": self._interface},
        }
        self._call(Request("POST", RULES_PATH, _encode(body)))
        return Empty()

    def _set_prompting(self, enabled: bool) -> Empty:
        self._call(Request("PUT", SYSTEM_CONF_PATH, _encode({PROMPTING_KEY: enabled})))
        return Empty()

    def _rules_path(self) -> str:
        return f"{RULES_PATH}?{urlencode({'interface': self._interface})}"

    def _call(self, request: Request) -> object:
        log.debug("%s %s", request.method, request.path)
        try:
            response = self._transport.do(request)
            if not 200 <= response.status < 300:
                raise TransportError(
                    f"{request.method} {request.path}: HTTP {response.status}",
                    status=response.status,
                )
            return decode_envelope(response.body)
        except PermissionsError as e:
            log.debug("%s %s failed: %s", request.method, request.path, e)
            raise


def _encode(payload: dict) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode()
