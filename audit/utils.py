import json
import logging
import threading

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import connection, transaction

from audit.models import AuditLog

logger = logging.getLogger("audit")


def _sanitize(metadata):
    # UUIDs, Decimals and datetimes become plain JSON values
    if metadata is None:
        return None
    return json.loads(json.dumps(metadata, cls=DjangoJSONEncoder))


def _persist(payload):
    try:
        AuditLog.objects.create(**payload)
    except Exception as e:
        logger.error(f"[Audit] Failed to persist {payload.get('action')} on {payload.get('entity_id')}: {e}")


def _persist_in_thread(payload):
    try:
        _persist(payload)
    finally:
        connection.close()


def log_audit_event(user_id, action, entity, entity_id=None, metadata=None):
    """
    Record an audit event without blocking or failing the caller.

    The row is written after the surrounding transaction commits (immediately
    when there is none). With ``AUDIT_LOG_ASYNC`` the write happens on a
    daemon thread. Failures are logged and dropped.
    """
    try:
        payload = {
            "user_id": user_id,
            "action": action,
            "entity": entity,
            "entity_id": str(entity_id) if entity_id is not None else None,
            "metadata": _sanitize(metadata),
        }
    except (TypeError, ValueError) as e:
        logger.error(f"[Audit] Unserialisable metadata for {action}: {e}")
        return

    logger.info(f"{action} {entity}:{payload['entity_id']} by user {user_id}")

    def _dispatch():
        if getattr(settings, "AUDIT_LOG_ASYNC", True):
            threading.Thread(target=_persist_in_thread, args=(payload,), daemon=True).start()
        else:
            _persist(payload)

    transaction.on_commit(_dispatch)
