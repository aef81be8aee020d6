"""
Tenant dashboard statistics.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from franchisehub.db import models
from franchisehub.db.models import TicketStatus


def get_dashboard_stats(db: Session, tenant_id: uuid.UUID) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    documents = db.query(models.Document).filter(
        models.Document.tenant_id == tenant_id,
        models.Document.is_deleted.is_(False),
    )
    total_documents = documents.count()
    docs_this_week = documents.filter(models.Document.created_at >= now - timedelta(days=7)).count()

    live_tickets = db.query(models.Ticket).filter(
        models.Ticket.tenant_id == tenant_id,
        models.Ticket.status != TicketStatus.SUPPRIME.value,
    )
    tickets_by_status = {
        status: count
        for status, count in live_tickets.with_entities(models.Ticket.status, func.count(models.Ticket.id))
        .group_by(models.Ticket.status)
        .all()
    }

    # Bucket in Python so the day boundaries are the same on every backend
    today = now.date()
    first_day = today - timedelta(days=6)
    per_day = {first_day + timedelta(days=offset): 0 for offset in range(7)}
    window_start = datetime(first_day.year, first_day.month, first_day.day, tzinfo=timezone.utc)
    for (created_at,) in live_tickets.filter(models.Ticket.created_at >= window_start).with_entities(
        models.Ticket.created_at
    ):
        day = models.as_utc(created_at).date()
        if day in per_day:
            per_day[day] += 1

    return {
        "total_documents": total_documents,
        "docs_this_week": docs_this_week,
        "tickets_by_status": tickets_by_status,
        "tickets_per_day": [{"date": day, "count": count} for day, count in sorted(per_day.items())],
    }
