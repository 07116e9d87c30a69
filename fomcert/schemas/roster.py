"""
Roster Models
Normalized list records (graduates, members) used by repeating placeholders
"""

from pydantic import BaseModel, Field
from typing import Optional


class RosterRecord(BaseModel):
    """One person in a roster, with canonical field names"""
    name: Optional[str] = None
    country: Optional[str] = None
    university: Optional[str] = None
    major: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    message: Optional[str] = None
    picture_count: int = Field(default=0, ge=0)

    def display(self, field: str) -> str:
        value = getattr(self, field)
        if value is None or str(value).strip() == "":
            return "N/A"
        return str(value)
