"""OCSF (Open Cybersecurity Schema Framework) session event logging.

Emits structured Authentication events for the session lifecycle. Events are
logged to the ``ocsf`` logger as JSON; consumers attach their own handlers
(CloudWatch JSON formatter, Firehose, structlog, etc.).

Usage::

    from . import ocsf
    ocsf.session_event(
        activity_id=ocsf.AuthActivity.LOGOFF,
        activity_name="Logoff",
        status_id=ocsf.Status.SUCCESS,
        severity_id=ocsf.Severity.INFORMATIONAL,
        session_name="session",
        session_id="65f0c0ffee...",
        message="Session destroyed",
    )
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

logger = logging.getLogger("ocsf")


class EventClass:
    AUTHENTICATION = 3001


class AuthActivity:
    LOGON = 1
    LOGOFF = 2


class Status:
    SUCCESS = 1
    FAILURE = 2


class Severity:
    INFORMATIONAL = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    CRITICAL = 5


_SEVERITY_NAMES = {
    Severity.INFORMATIONAL: "Informational",
    Severity.LOW: "Low",
    Severity.MEDIUM: "Medium",
    Severity.HIGH: "High",
    Severity.CRITICAL: "Critical",
}

_PRODUCT = {
    "name": "docsession",
    "version": "0.1.0",
    "vendor_name": "docsession",
}


def emit(event: dict[str, Any]) -> None:
    """Log an OCSF event as JSON."""
    try:
        payload = json.dumps(event, default=str)
    except (TypeError, ValueError):
        logger.warning("Dropped unserializable OCSF event: %r", event.get("message"))
        return
    logger.info(payload)


def session_event(
    *,
    activity_id: int,
    activity_name: str,
    status_id: int,
    severity_id: int,
    session_name: str,
    session_id: str | None = None,
    message: str = "",
) -> None:
    """Emit an OCSF Authentication (3001) event for a session."""
    session: dict[str, Any] = {"name": session_name}
    if session_id:
        session["uid"] = session_id

    event: dict[str, Any] = {
        "class_uid": EventClass.AUTHENTICATION,
        "class_name": "Authentication",
        "activity_id": activity_id,
        "activity_name": activity_name,
        "severity_id": severity_id,
        "severity": _SEVERITY_NAMES.get(severity_id, "Unknown"),
        "status_id": status_id,
        "status": "Success" if status_id == Status.SUCCESS else "Failure",
        "time": int(time.time() * 1000),
        "metadata": {"product": _PRODUCT},
        "session": session,
        "message": message,
    }
    emit(event)
