from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Request context supplied by the identity layer: who is acting, in what role, for which school."""

    id: UUID
    role: str
    school_id: Optional[UUID] = None
