"""Core data models for snapperms."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path


class Outcome(Enum):
    ALLOW = "allow"
    DENY = "deny"


class Lifespan(Enum):
    FOREVER = "forever"
    SESSION = "session"
    SINGLE = "single"
    TIMESPAN = "timespan"


class Permission(Enum):
    READ = "read"
    WRITE = "write"
    EXECUTE = "execute"


@dataclass(frozen=True)
class Constraints:
    path_pattern: str
    permissions: tuple[Permission, ...]

    def __post_init__(self) -> None:
        if not self.path_pattern:
            raise ValueError("path_pattern must not be empty")


@dataclass(frozen=True)
class CustomRule:
    id: str
    timestamp: datetime
    user: int
    snap: str
    interface: str
    constraints: Constraints
    outcome: Outcome
    lifespan: Lifespan
    expiration: datetime | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id must not be empty")
        if not self.snap:
            raise ValueError("snap must not be empty")


@dataclass(frozen=True)
class PathSnapshot:
    rule_id: str
    snap: str
    path_pattern: str
    permissions: tuple[Permission, ...]
    outcome: Outcome
    lifespan: Lifespan

    @classmethod
    def from_rule(cls, rule: CustomRule) -> "PathSnapshot":
        return cls(
            rule_id=rule.id,
            snap=rule.snap,
            path_pattern=rule.constraints.path_pattern,
            permissions=rule.constraints.permissions,
            outcome=rule.outcome,
            lifespan=rule.lifespan,
        )


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class PathSnapshots:
    pathsnaps: list[PathSnapshot] = field(default_factory=list)


@dataclass
class AppConfig:
    socket_path: Path = field(default_factory=lambda: Path("/run/snapd.socket"))
    base_url: str = "http://localhost"
    timeout: float = 10.0
    interface: str = "home"
