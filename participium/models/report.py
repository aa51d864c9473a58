"""
Pydantic models for citizen reports and their lifecycle fields.

DESIGN NOTE:
- Submission (title, photos, location) happens outside this engine
- Lifecycle fields are only changed by the status workflow
- Models validate shape; transition rules live in services.status_workflow
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum


class Category(str, Enum):
    """Fixed set of issue categories a citizen can pick."""
    WATER_SUPPLY_DRINKING_WATER = "WATER_SUPPLY_DRINKING_WATER"
    ARCHITECTURAL_BARRIERS = "ARCHITECTURAL_BARRIERS"
    SEWER_SYSTEM = "SEWER_SYSTEM"
    PUBLIC_LIGHTING = "PUBLIC_LIGHTING"
    WASTE = "WASTE"
    ROAD_SIGNS_TRAFFIC_LIGHTS = "ROAD_SIGNS_TRAFFIC_LIGHTS"
    ROADS_URBAN_FURNISHINGS = "ROADS_URBAN_FURNISHINGS"
    PUBLIC_GREEN_AREAS_PLAYGROUNDS = "PUBLIC_GREEN_AREAS_PLAYGROUNDS"
    OTHER = "OTHER"


class ReportStatus(str, Enum):
    """
    Report lifecycle.

    PENDING_APPROVAL → ASSIGNED → IN_PROGRESS ⇄ SUSPENDED → RESOLVED
    PENDING_APPROVAL → REJECTED
    """
    PENDING_APPROVAL = "PENDING_APPROVAL"  # Initial state, awaiting a reviewer
    ASSIGNED = "ASSIGNED"                  # Routed to an office and officer
    IN_PROGRESS = "IN_PROGRESS"
    SUSPENDED = "SUSPENDED"
    RESOLVED = "RESOLVED"                  # Terminal
    REJECTED = "REJECTED"                  # Terminal, carries a reason


TERMINAL_STATUSES = frozenset({ReportStatus.RESOLVED, ReportStatus.REJECTED})


class ReportCreate(BaseModel):
    """
    Submission data handed over by the intake flow.
    Photo references are opaque keys produced by the image pipeline.
    """
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    category: Category
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    photos: List[str] = Field(default_factory=list, description="Opaque photo references")
    user_id: Optional[int] = Field(None, description="Submitter id, None if unknown")
    anonymous: bool = False


class Report(BaseModel):
    """
    Stored report.

    Invariants (checked by services.status_workflow.check_invariants):
    - rejection_reason is non-empty iff status == REJECTED
    - assigned_office / assigned_officer_id are set once approved
    """
    id: int
    title: str
    description: str
    category: Category
    latitude: float
    longitude: float
    photos: List[str] = Field(default_factory=list)
    user_id: Optional[int] = None
    anonymous: bool = False

    status: ReportStatus = ReportStatus.PENDING_APPROVAL
    assigned_office: Optional[str] = None
    assigned_officer_id: Optional[int] = None
    external_maintainer_id: Optional[int] = None
    rejection_reason: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    # Optimistic concurrency token, bumped by the store on every save
    version: int = 0

    @property
    def is_open(self) -> bool:
        return self.status not in TERMINAL_STATUSES
