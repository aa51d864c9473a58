"""
Comment models for the municipality <-> external maintainer channel.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional
from enum import Enum


class AuthorType(str, Enum):
    """The only two roles allowed to write on a report's channel."""
    MUNICIPALITY = "MUNICIPALITY"
    EXTERNAL_MAINTAINER = "EXTERNAL_MAINTAINER"


class Comment(BaseModel):
    """
    A single entry of a report's collaboration ledger.

    Exactly one of municipality_user_id / external_maintainer_id is set;
    the other is an explicit None so it is always present when dumped.
    """
    id: Optional[int] = Field(None, description="Assigned by the ledger store")
    report_id: int
    content: str = Field(..., min_length=1)
    municipality_user_id: Optional[int] = None
    external_maintainer_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _exactly_one_author(self):
        if (self.municipality_user_id is None) == (self.external_maintainer_id is None):
            raise ValueError("exactly one of municipality_user_id / external_maintainer_id must be set")
        return self

    @property
    def author_type(self) -> AuthorType:
        if self.municipality_user_id is not None:
            return AuthorType.MUNICIPALITY
        return AuthorType.EXTERNAL_MAINTAINER

    @property
    def author_id(self) -> int:
        if self.municipality_user_id is not None:
            return self.municipality_user_id
        return self.external_maintainer_id

    @classmethod
    def authored_by(cls, report_id: int, author_type: AuthorType, author_id: int, content: str) -> "Comment":
        """Build a comment with the author reference in the right slot."""
        if author_type == AuthorType.MUNICIPALITY:
            return cls(report_id=report_id, content=content, municipality_user_id=author_id, external_maintainer_id=None)
        return cls(report_id=report_id, content=content, municipality_user_id=None, external_maintainer_id=author_id)
