import asyncio
import typing as t

import campuslive.lib.cli as click
from campuslive.core import di
from campuslive.model import announcements_channel, BroadcastAll, BroadcastChannel, BroadcastRole, course_channel, \
    Event, MessageIdentity, NotifyIdentity, UserID, UserRole
from campuslive.realtime import EventBridge, LocalEventBridge


@click.group()
def event(): ...


def _require_remote(bridge: EventBridge) -> None:
    if isinstance(bridge, LocalEventBridge):
        raise click.ClickException("publishing from the command line requires storage.redis to be configured")


def _publish(bridge: EventBridge, ev: Event) -> None:
    _require_remote(bridge)
    asyncio.run(bridge.publish(ev))
    click.echo(f"published {ev.kind} {ev.event_id}")


@event.command(name="notify")
@click.argument("user_id")
@click.argument("topic")
@click.option("-b", "--body", type=click.JSONObjectType(), default="{}")
@di.inject
def notify(user_id: str, topic: str, body: dict[str, t.Any], bridge: EventBridge = di.Provide["realtime.bridge"]):
    """Notify every session of one user, e.g. new:grade."""
    _publish(bridge, NotifyIdentity(target=UserID(user_id), topic=topic, body=body))


@event.command(name="message")
@click.argument("user_id")
@click.option("-f", "--sender", default=None)
@click.option("-b", "--body", type=click.JSONObjectType(), default="{}")
@di.inject
def message(
    user_id: str,
    sender: str | None,
    body: dict[str, t.Any],
    bridge: EventBridge = di.Provide["realtime.bridge"],
):
    """Deliver a direct message to one user's mailbox."""
    _publish(
        bridge,
        MessageIdentity(
            target=UserID(user_id),
            sender=UserID(sender) if sender else None,
            topic="new:message",
            body=body,
        ),
    )


@event.command(name="course")
@click.argument("course_id")
@click.argument("topic")
@click.option("-b", "--body", type=click.JSONObjectType(), default="{}")
@di.inject
def course(course_id: str, topic: str, body: dict[str, t.Any], bridge: EventBridge = di.Provide["realtime.bridge"]):
    """Broadcast to everyone currently in a course session, e.g. class:update."""
    ev = BroadcastChannel(target=course_channel(course_id), topic=topic, body={"course_id": course_id, **body})
    _publish(bridge, ev)


@event.command(name="announce")
@click.argument("topic")
@click.option("-r", "--role", type=click.EnumType(UserRole), default=None, help="limit to one role")
@click.option("-C", "--course", "course_id", default=None, help="post to one course's announcements channel")
@click.option("-b", "--body", type=click.JSONObjectType(), default="{}")
@di.inject
def announce(
    topic: str,
    role: UserRole | None,
    course_id: str | None,
    body: dict[str, t.Any],
    bridge: EventBridge = di.Provide["realtime.bridge"],
):
    """Announce to every connected user; -r or -C narrows the audience."""
    ev: Event
    if role and course_id:
        raise click.UsageError("--role and --course are mutually exclusive")
    elif course_id:
        ev = BroadcastChannel(
            target=announcements_channel(course_id), topic=topic, body={"course_id": course_id, **body}
        )
    elif role:
        ev = BroadcastRole(target=role, topic=topic, body=body)
    else:
        ev = BroadcastAll(topic=topic, body=body)
    _publish(bridge, ev)


@event.command(name="disconnect")
@click.argument("user_id")
@click.option("-r", "--reason", default="account_deactivated", show_default=True)
@di.inject
def disconnect(user_id: str, reason: str, bridge: EventBridge = di.Provide["realtime.bridge"]):
    """Close every session a user holds, on every realtime process."""
    _require_remote(bridge)
    asyncio.run(bridge.disconnect(UserID(user_id), reason))
    click.echo(f"requested disconnect of {user_id} ({reason})")
