"""Channel naming policy.

Personal channels are namespaced by user ID so that an event addressed to an
identity can be resolved without knowing its connection IDs. Course channels are
namespaced by course ID; each course also has an announcements channel,
`announcements:course:<id>`, that only faculty and admins post to. Role and
global channels are joined implicitly from the identity's role when a
connection is born.
"""

from __future__ import annotations

import enum
import typing as t

from .enum import UserRole
from .id import CourseID, UserID

Separator: t.Final[str] = ":"
GlobalChannel: t.Final[str] = "global"


class ChannelKind(enum.Enum):
    Notifications = "notifications"
    Chat = "chat"
    Course = "course"
    Announcements = "announcements"
    Role = "role"
    Global = "global"


class ChannelRef(t.NamedTuple):
    kind: ChannelKind
    key: str | None = None

    @property
    def name(self) -> str:
        if self.key is None:
            return self.kind.value
        if self.kind is ChannelKind.Announcements:
            return Separator.join((self.kind.value, ChannelKind.Course.value, self.key))
        return f"{self.kind.value}{Separator}{self.key}"

    @property
    def course_id(self) -> str | None:
        if self.kind in (ChannelKind.Course, ChannelKind.Announcements):
            return self.key
        return None

    @property
    def is_personal(self) -> bool:
        return self.kind in (ChannelKind.Notifications, ChannelKind.Chat)

    @property
    def is_implicit(self) -> bool:
        return self.kind in (ChannelKind.Role, ChannelKind.Global)

    def is_owned_by(self, user_id: UserID) -> bool:
        return self.is_personal and self.key == user_id


def notifications_channel(user_id: UserID) -> str:
    return ChannelRef(ChannelKind.Notifications, user_id).name


def chat_channel(user_id: UserID) -> str:
    return ChannelRef(ChannelKind.Chat, user_id).name


def course_channel(course_id: CourseID | str) -> str:
    return ChannelRef(ChannelKind.Course, course_id).name


def announcements_channel(course_id: CourseID | str) -> str:
    return ChannelRef(ChannelKind.Announcements, course_id).name


def role_channel(role: UserRole) -> str:
    return ChannelRef(ChannelKind.Role, role.value).name


def parse_channel(name: str) -> ChannelRef:
    """Parse a channel name into its kind and key.

    Raises:
        ValueError: if the name does not follow the naming policy.
    """
    if name == GlobalChannel:
        return ChannelRef(ChannelKind.Global)

    prefix, sep, key = name.partition(Separator)
    if not sep or not key or not key.strip():
        raise ValueError(f"invalid channel name: {name!r}")

    try:
        kind = ChannelKind(prefix)
    except ValueError as e:
        raise ValueError(f"unknown channel kind: {prefix!r}") from e

    match kind:
        case ChannelKind.Global:
            raise ValueError(f"invalid channel name: {name!r}")
        case ChannelKind.Role:
            UserRole(key)
        case ChannelKind.Announcements:
            scope, sep, course_id = key.partition(Separator)
            if scope != ChannelKind.Course.value or not sep or not course_id.strip():
                raise ValueError(f"invalid announcements channel: {name!r}")
            key = course_id
        case ChannelKind.Notifications | ChannelKind.Chat | ChannelKind.Course:
            pass
    return ChannelRef(kind, key)
