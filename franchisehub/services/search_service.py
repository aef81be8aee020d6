"""
Tenant-scoped text search over documents, tickets and announcements.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import TicketStatus

MAX_RESULTS_PER_KIND = 10
DESCRIPTION_LENGTH = 100
LIKE_ESCAPE = "\\"


def _like_pattern(q: str) -> str:
    term = q.strip()
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return f"%{term}%"


def _result(id_, title, type_, description, created_at, restaurant_name=None) -> Dict[str, Any]:
    return {
        "id": str(id_),
        "title": title,
        "type": type_,
        "description": (description or "")[:DESCRIPTION_LENGTH] or None,
        "created_at": models.as_utc(created_at).isoformat() if created_at else "",
        "restaurant_name": restaurant_name,
    }


def search(
    db: Session,
    *,
    q: str,
    tenant_id: uuid.UUID,
    restaurant_id: Optional[uuid.UUID] = None,
) -> Dict[str, Any]:
    """Case-insensitive substring search; ``restaurant_id`` narrows tickets to one restaurant."""
    pattern = _like_pattern(q)

    documents = (
        db.query(models.Document)
        .filter(
            models.Document.tenant_id == tenant_id,
            models.Document.is_deleted.is_(False),
            models.Document.name.ilike(pattern, escape=LIKE_ESCAPE),
        )
        .order_by(models.Document.created_at.desc())
        .limit(MAX_RESULTS_PER_KIND)
        .all()
    )

    ticket_query = db.query(models.Ticket).filter(
        models.Ticket.tenant_id == tenant_id,
        models.Ticket.status != TicketStatus.SUPPRIME.value,
        or_(
            models.Ticket.title.ilike(pattern, escape=LIKE_ESCAPE),
            models.Ticket.description.ilike(pattern, escape=LIKE_ESCAPE),
        ),
    )
    if restaurant_id:
        ticket_query = ticket_query.filter(models.Ticket.restaurant_id == restaurant_id)
    tickets = ticket_query.order_by(models.Ticket.created_at.desc()).limit(MAX_RESULTS_PER_KIND).all()

    announcements = (
        db.query(models.Announcement)
        .filter(
            models.Announcement.tenant_id == tenant_id,
            models.Announcement.is_deleted.is_(False),
            or_(
                models.Announcement.title.ilike(pattern, escape=LIKE_ESCAPE),
                models.Announcement.content.ilike(pattern, escape=LIKE_ESCAPE),
            ),
        )
        .order_by(models.Announcement.created_at.desc())
        .limit(MAX_RESULTS_PER_KIND)
        .all()
    )

    results: Dict[str, List[Dict[str, Any]]] = {
        "documents": [_result(d.id, d.name, "document", d.url, d.created_at) for d in documents],
        "tickets": [
            _result(
                t.id, t.title, "ticket", t.description, t.created_at,
                t.restaurant.name if t.restaurant else None,
            )
            for t in tickets
        ],
        "announcements": [
            _result(a.id, a.title, "announcement", a.content, a.created_at) for a in announcements
        ],
    }
    results["total"] = sum(len(rows) for rows in results.values())
    return results
