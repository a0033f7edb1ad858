"""Site analytics models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class VisitCount(BaseModel):
    """Running total of site visits."""

    count: int = 0
    last_updated: Optional[datetime] = None
