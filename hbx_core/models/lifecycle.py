"""
Model Lifecycle Callbacks.

Runs `before_create()` on objects about to be inserted and `before_save()`
on objects about to be inserted or updated, for every Session.

Source: https://docs.sqlalchemy.org/en/20/orm/events.html#sqlalchemy.orm.SessionEvents.before_flush
Verified: 2025-12-18
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import Session


@event.listens_for(Session, "before_flush")
def run_lifecycle_callbacks(session: Session, flush_context: Any, instances: Any) -> None:
    new = list(session.new)
    for obj in new:
        before_create = getattr(obj, "before_create", None)
        if before_create is not None:
            before_create()

    for obj in new + [o for o in session.dirty if o not in session.new]:
        before_save = getattr(obj, "before_save", None)
        if before_save is not None:
            before_save()
