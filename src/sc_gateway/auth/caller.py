"""Caller identity — who is making a request, as told by the auth provider."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Caller:
    uid: str | None
    admin: bool = False
    roles: tuple[str, ...] = field(default_factory=tuple)
    display_name: str | None = None


ANONYMOUS = Caller(uid=None)
