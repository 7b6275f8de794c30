from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

from ..services.date_rules import DISPLAY_FORMAT


# Rendered as "yyyy-MM-dd HH:mm:ss" on the wire
Timestamp = Annotated[
    datetime,
    PlainSerializer(lambda v: v.strftime(DISPLAY_FORMAT), return_type=str, when_used="json"),
]


class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, str) and not v.strip():
        return None
    return v
