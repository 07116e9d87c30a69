"""
Organization Models
Branding and leadership used when issuing certificates
"""

from pydantic import BaseModel, Field
from typing import Optional


class OrganizationColors(BaseModel):
    primary: str = "#0c436a"
    secondary: str = "#2596be"
    accent: str = "#436c87"
    text: str = "#374151"


class CovenantVerse(BaseModel):
    text: str
    reference: str


class Leadership(BaseModel):
    executive_director: Optional[str] = None
    chairperson: Optional[str] = None
    secretary: Optional[str] = None


class Organization(BaseModel):
    """Organization that issues certificates"""
    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    prefix: str = Field(default="FOM", min_length=2, max_length=6, description="Certificate ID prefix")
    tagline: Optional[str] = None
    logo: Optional[str] = None
    colors: OrganizationColors = Field(default_factory=OrganizationColors)
    covenant_verse: Optional[CovenantVerse] = None
    leadership: Leadership = Field(default_factory=Leadership)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "jicf",
                "name": "JINAN INTERNATIONAL CHRISTIAN FELLOWSHIP",
                "prefix": "JICF",
                "leadership": {"chairperson": "Pastor John"}
            }
        }

    def default_issuer(self) -> str:
        return (
            self.leadership.executive_director
            or self.leadership.chairperson
            or "Authorized Official"
        )


# Branding strings that appear in the stock templates
DEFAULT_ORGANIZATION_NAME = "FISHERS OF MEN"
DEFAULT_TAGLINE = "Bringing Jesus to the World"
DEFAULT_LOGO = "/Logo.png"
DEFAULT_PRIMARY_COLOR = "#0c436a"
DEFAULT_VERSE_MARKER = "Do not be afraid"
DEFAULT_VERSE_REFERENCE = "2 Kings 6:16"

FOM_ORGANIZATION = Organization(
    id="fom",
    name=DEFAULT_ORGANIZATION_NAME,
    prefix="FOM",
    tagline=DEFAULT_TAGLINE,
    logo=DEFAULT_LOGO,
    covenant_verse=CovenantVerse(
        text="Do not be afraid, for those who are with us are more than those who are with them",
        reference=DEFAULT_VERSE_REFERENCE,
    ),
    leadership=Leadership(
        executive_director="Mr. Enoch Kwateh Dongbo",
        chairperson="Mr. Gerald Canaan Sohn",
        secretary="Miss. Patience Fero",
    ),
)
