import hashlib
import json
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from ...application.ports.audit_logger import AuditLogger


class StdAuditLogger(AuditLogger):
    """Account events as one JSON line each on the ``pichost.audit`` logger.

    Usernames are recorded as a truncated SHA-256 digest: repeated attempts
    against one account correlate without the name appearing in the logs.
    """

    def __init__(self, logger_name: str = "pichost.audit") -> None:
        self._logger = logging.getLogger(logger_name)

    @staticmethod
    def actor_digest(username: str) -> str:
        return hashlib.sha256(username.strip().lower().encode()).hexdigest()[:16]

    def log(self, action: str, username: str, user_id: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        event = {
            "at": datetime.now(timezone.utc).isoformat(),
            "event": action,
            "outcome": "ok" if success else "denied",
            "actor": self.actor_digest(username),
            "user_id": user_id,
        }
        if details:
            event["details"] = details
        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, "AUDIT: %s", json.dumps(event, sort_keys=True, default=str))
