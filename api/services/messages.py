"""
Message service functions for API endpoints.

Application message threads, the contact permission latch and unread
counts driven by per-role read markers.
"""

from typing import Any, Dict
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.actors import Actor
from core.unread import aggregate_unread, first_unread_index, unread_by_application
from core.utils.datetime import ensure_utc
from core.workflow import clean_message_content, latch_contact_permission
from database.models.applications import Application, ReadMarker
from database.models.communications import Message
from database.models.engineers import Engineer
from api.services.applications import load_application, serialize_application

logger = logging.getLogger(__name__)


def serialize_message(message: Message) -> Dict[str, Any]:
    return {
        "id": message.id,
        "application_id": message.application_id,
        "sender_type": message.sender_type.value,
        "content": message.content,
        "created_at": message.created_at.isoformat() if message.created_at else None,
    }


async def post_message(
    db: AsyncSession, actor: Actor, application_id: int, content: str
) -> Dict[str, Any]:
    """
    Post a message on an application thread.

    The sender type is the actor's role. An engineer's message sets the
    contact permission latch in the same commit as the message.

    Raises:
        EmptyContent: Content blank after trimming
        NotFound: Application missing
        Forbidden: Actor is not a participant
    """
    cleaned = clean_message_content(content)
    application = await load_application(db, application_id, lock=True)
    actor.require_party(application)

    message = Message(
        application_id=application.id,
        sender_type=actor.sender_type,
        content=cleaned,
    )
    db.add(message)
    latched = latch_contact_permission(application, actor.sender_type)
    await db.commit()

    if latched:
        logger.info(f"Contact permission granted on application {application_id}")

    payload = serialize_message(message)
    payload["has_contact_permission"] = application.has_contact_permission
    return payload


async def _get_marker(db: AsyncSession, application_id: int, role) -> ReadMarker | None:
    result = await db.execute(
        select(ReadMarker).where(
            ReadMarker.application_id == application_id,
            ReadMarker.reader_role == role,
        )
    )
    return result.scalar_one_or_none()


async def list_messages(
    db: AsyncSession, actor: Actor, application_id: int
) -> Dict[str, Any]:
    """
    Read an application's thread, oldest first.

    Viewing moves the actor's read marker to the newest message returned,
    so the actor has no unread messages among them afterwards. The
    response says where the unread part of the thread started.
    """
    application = await load_application(db, application_id)
    actor.require_party(application)

    result = await db.execute(
        select(Message)
        .where(Message.application_id == application_id)
        .order_by(Message.created_at, Message.id)
    )
    messages = list(result.scalars().all())

    marker = await _get_marker(db, application_id, actor.role)
    last_read_at = marker.last_read_at if marker else None
    first_unread = first_unread_index(messages, actor.role, last_read_at)

    # The marker never passes the newest message returned; a message that
    # commits after the SELECT stays unread
    seen_until = max((ensure_utc(m.created_at) for m in messages), default=None)
    if seen_until is not None:
        if marker is None:
            db.add(ReadMarker(
                application_id=application_id,
                reader_role=actor.role,
                last_read_at=seen_until,
            ))
        elif ensure_utc(marker.last_read_at) < seen_until:
            marker.last_read_at = seen_until
        await db.commit()

    return {
        "application": serialize_application(application, actor),
        "messages": [serialize_message(m) for m in messages],
        "first_unread_index": first_unread,
    }


async def _unread_counts(
    db: AsyncSession, actor: Actor, application_ids: list[int]
) -> dict[int, int]:
    if not application_ids:
        return {}

    messages_result = await db.execute(
        select(Message).where(
            Message.application_id.in_(application_ids),
            Message.sender_type != actor.sender_type,
        )
    )
    markers_result = await db.execute(
        select(ReadMarker).where(
            ReadMarker.application_id.in_(application_ids),
            ReadMarker.reader_role == actor.role,
        )
    )
    markers = {m.application_id: m.last_read_at for m in markers_result.scalars()}
    return unread_by_application(messages_result.scalars().all(), actor.role, markers)


async def applications_with_unread(db: AsyncSession, actor: Actor) -> Dict[str, Any]:
    """
    Every application the actor participates in, with its unread count.

    Returns:
        Dictionary with the applications and the dashboard total
    """
    result = await db.execute(
        select(Application)
        .options(
            selectinload(Application.job),
            selectinload(Application.project),
            selectinload(Application.engineer).selectinload(Engineer.user),
        )
        .where(actor.application_filter())
        .order_by(Application.updated_at.desc(), Application.id.desc())
    )
    applications = result.scalars().all()
    counts = await _unread_counts(db, actor, [a.id for a in applications])

    items = []
    for application in applications:
        item = serialize_application(application, actor)
        item["unread_count"] = counts.get(application.id, 0)
        items.append(item)

    return {"applications": items, "total_unread": aggregate_unread(counts)}


async def unread_total(db: AsyncSession, actor: Actor) -> int:
    """Unread badge total across all of the actor's applications."""
    result = await db.execute(
        select(Application.id).where(actor.application_filter())
    )
    counts = await _unread_counts(db, actor, list(result.scalars().all()))
    return aggregate_unread(counts)
