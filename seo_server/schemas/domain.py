"""
Schemas - Domain Models

Aggregate owned by the account layer; the pipeline only reads and increments it.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Domain(BaseModel):
    """Registered site whose pages are analyzed."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    pages_analyzed: int = 0
    last_analyzed: Optional[datetime] = None
