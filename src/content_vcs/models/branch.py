"""Version branch models."""

from datetime import datetime

from pydantic import BaseModel

MAIN_BRANCH = "main"


class Branch(BaseModel):
    """A named line of versions for one document."""

    id: str
    document_id: str
    name: str
    description: str | None = None
    created_from: str | None = None
    is_main: bool = False
    is_active: bool = True
    created_at: datetime | None = None
    created_by: str | None = None
    merged_at: datetime | None = None
    merged_by: str | None = None
    merged_into: str | None = None

    @property
    def is_merged(self) -> bool:
        """Whether this branch has been folded into another."""
        return self.merged_at is not None or self.merged_into is not None
