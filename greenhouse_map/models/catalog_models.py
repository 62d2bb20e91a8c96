"""
Catalog Models for Greenhouse Map
=================================

Existing growbeds and fish tanks that map components can be linked to.
"""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel


class FixtureKind(str, Enum):
    """Catalog table a fixture comes from."""
    GROWBED = "growbed"
    FISHTANK = "fishtank"


# Growbed fill by bed type
GROWBED_TYPE_COLORS = {
    "DWC": "#2196F3",
    "Media bed": "#9E9E9E",
    "Wicking bed": "#4CAF50",
}
GROWBED_FALLBACK_COLOR = "#4CAF50"
FISHTANK_COLOR = "#2196F3"
DEFAULT_FISHTANK_TYPE = "standard"


def growbed_color(bed_type: Optional[str]) -> str:
    return GROWBED_TYPE_COLORS.get(bed_type or "", GROWBED_FALLBACK_COLOR)


class CatalogFixture(BaseModel):
    """A growbed or fish tank record from the greenhouse register."""
    id: Union[int, str]
    name: str
    kind: FixtureKind
    type: Optional[str] = None
    status: Optional[str] = None

    class Config:
        use_enum_values = True
        validate_default = True

    @property
    def metadata_key(self) -> str:
        """Metadata key a linked map component stores this fixture's id under."""
        return f"{self.kind}_id"
