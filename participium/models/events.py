"""
Events emitted for the notification dispatcher.

The engine only describes who should hear about a change; pushing it over
a socket (or anything else) is somebody else's job.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List
from enum import Enum


class EventKind(str, Enum):
    STATUS_CHANGED = "STATUS_CHANGED"
    MAINTAINER_ATTACHED = "MAINTAINER_ATTACHED"
    COMMENT_ADDED = "COMMENT_ADDED"


class RecipientRole(str, Enum):
    CITIZEN = "CITIZEN"
    MUNICIPALITY = "MUNICIPALITY"
    EXTERNAL_MAINTAINER = "EXTERNAL_MAINTAINER"


class Recipient(BaseModel):
    user_id: int
    role: RecipientRole

    @property
    def client_key(self) -> str:
        """Key used by the push layer to find open connections."""
        return f"{self.role.value}:{self.user_id}"


class LifecycleEvent(BaseModel):
    kind: EventKind
    report_id: int
    recipients: List[Recipient] = Field(default_factory=list)
    payload: Dict[str, Any] = Field(default_factory=dict)
    occurred_at: datetime = Field(default_factory=datetime.utcnow)
