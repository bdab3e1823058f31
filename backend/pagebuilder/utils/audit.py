from flask import g
from pagebuilder.extensions import db
from pagebuilder.models.audit_log import AuditLog
from typing import Optional

def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None
):
    site = getattr(g, "current_site", None)
    if site is None:
        return  # No site context (CLI, background jobs): nothing to attribute

    log = AuditLog()

    log.actor_id = getattr(g, "current_user_id", None)
    log.site_id = site.id
    log.action = action
    log.entity_type = entity_type
    log.entity_id = str(entity_id)
    log.payload = payload or {}

    db.session.add(log)
