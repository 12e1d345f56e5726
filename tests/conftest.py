"""Shared test fixtures for snapperms tests."""

import copy
import json
from pathlib import Path

import pytest

from snapperms.lib.errors import TransportError
from snapperms.lib.transport import Request, Response


# --- Sample snapd payloads ---


APP_PERMISSIONS_JSON = """
{
  "type": "sync",
  "status-code": 200,
  "status": "OK",
  "result":
    {
      "experimental":
        {
          "apparmor-prompting": %s
        }
    }
}
"""


SAMPLE_RULES = [
    {
        "id": "C7JGESQZTWTSS===",
        "timestamp": "2024-05-24T09:21:18.378444585Z",
        "user": 1000,
        "snap": "simple-notepad",
        "interface": "home",
        "constraints": {
            "path-pattern": "/home/ubuntu/.config/fobar",
            "permissions": ["read", "write"],
        },
        "outcome": "allow",
        "lifespan": "forever",
        "expiration": "0001-01-01T00:00:00Z",
    },
    {
        "id": "C7JHBW7E7Q7PO===",
        "timestamp": "2024-05-24T13:48:17.723465463Z",
        "user": 1000,
        "snap": "simple-notepad",
        "interface": "home",
        "constraints": {
            "path-pattern": "/home/ubuntu/Documents/fobar",
            "permissions": ["read", "write"],
        },
        "outcome": "allow",
        "lifespan": "forever",
        "expiration": "0001-01-01T00:00:00Z",
    },
]


CUSTOM_RULES_JSON = json.dumps(
    {"type": "sync", "status-code": 200, "status": "OK", "result": SAMPLE_RULES}
)

NO_CUSTOM_RULES_JSON = '{"type":"sync","status-code":200,"status":"OK","result":[]}'

TOGGLE_BODIES = (
    b'{"experimental.apparmor-prompting":false}',
    b'{"experimental.apparmor-prompting":true}',
)


# --- Sample Config TOML ---


SAMPLE_CONFIG_TOML = """\
[daemon]
socket = "{socket_path}"
base_url = "http://snapd"
timeout = 2.5

[rules]
interface = "home"
"""


class FakeTransport:
    """Deterministic stand-in for snapd, serving one operation's payloads.

    ``operation`` is one of: toggle, is_enabled, rules, remove.
    ``is_enabled`` selects the prompting flag, or a non-empty rules listing.
    """

    def __init__(
        self, operation: str, want_error: bool = False, is_enabled: bool = False
    ) -> None:
        self.operation = operation
        self.want_error = want_error
        self.is_enabled = is_enabled
        self.requests: list[Request] = []
        self.closed = False

    def do(self, request: Request) -> Response:
        self.requests.append(request)
        if self.want_error:
            raise TransportError("Error")

        if self.operation == "is_enabled":
            body = APP_PERMISSIONS_JSON % json.dumps(self.is_enabled)
            return Response(status=200, body=body.encode())
        if self.operation == "rules":
            body = CUSTOM_RULES_JSON if self.is_enabled else NO_CUSTOM_RULES_JSON
            return Response(status=200, body=body.encode())
        if self.operation == "toggle":
            if request.body in TOGGLE_BODIES:
                return Response(status=200, body=b"{}")
            raise TransportError("Error")
        if self.operation == "remove":
            payload = json.loads(request.body or b"{}")
            if payload.get("action") == "remove" and payload.get("selector"):
                return Response(status=200, body=b'{"type":"sync","result":[]}')
            raise TransportError("Error")
        raise AssertionError(f"unexpected operation {self.operation}")

    def close(self) -> None:
        self.closed = True


class StaticTransport:
    """Return the same status and body for every request."""

    def __init__(self, body: bytes | str, status: int = 200) -> None:
        self.body = body.encode() if isinstance(body, str) else body
        self.status = status
        self.requests: list[Request] = []

    def do(self, request: Request) -> Response:
        self.requests.append(request)
        return Response(status=self.status, body=self.body)

    def close(self) -> None:
        pass


# --- Fixtures ---


@pytest.fixture
def sample_rules() -> list[dict]:
    """Fresh copy of the two simple-notepad rules, safe to mutate."""
    return copy.deepcopy(SAMPLE_RULES)


@pytest.fixture
def custom_rules_json() -> str:
    return CUSTOM_RULES_JSON


@pytest.fixture
def fake_transport() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def static_transport() -> type[StaticTransport]:
    return StaticTransport


@pytest.fixture
def tmp_config_dir(tmp_path: Path) -> Path:
    """Create an isolated ~/.config/snapperms/ equivalent for tests."""
    config_dir = tmp_path / ".config" / "snapperms"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def config_toml_file(tmp_config_dir: Path, tmp_path: Path) -> Path:
    """Write sample config.toml pointing at a temp socket path."""
    p = tmp_config_dir / "config.toml"
    p.write_text(SAMPLE_CONFIG_TOML.format(socket_path=str(tmp_path / "snapd.socket")))
    return p
