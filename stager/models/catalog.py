from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class CatalogCategory(str, Enum):
    SOFA = "sofa"
    BED = "bed"
    TABLE = "table"
    RUG = "rug"
    DESK = "desk"
    SHELF = "shelf"
    MIRROR = "mirror"
    ARMCHAIR = "armchair"
    CHAIR = "chair"
    LAMP = "lamp"
    PAINT = "paint"
    OTHER = "other"

    @classmethod
    def from_text(cls, text: Optional[str]) -> "CatalogCategory":
        """
        Resolve a free-text catalog category by case-insensitive substring.

        Keywords are checked in CATEGORY_KEYWORDS order, so "armchair" wins over
        "chair" and "sofa bed" resolves to a sofa. Anything unmatched is OTHER.
        """
        if not text:
            return cls.OTHER
        lowered = text.lower()
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return category
        return cls.OTHER


# Ordered most specific first. Includes the French names used by EU retailers.
# Lamp nouns lead since "desk", "table" and "bed" often qualify a lamp.
CATEGORY_KEYWORDS = [
    (CatalogCategory.LAMP, ("lamp", "luminaire")),
    (CatalogCategory.ARMCHAIR, ("armchair", "fauteuil", "recliner", "lounge chair")),
    (CatalogCategory.CHAIR, ("chair", "chaise", "stool", "tabouret", "seating")),
    (CatalogCategory.SOFA, ("sofa", "couch", "canapé", "canape", "loveseat", "sectional", "settee")),
    (CatalogCategory.DESK, ("desk", "bureau")),
    (CatalogCategory.TABLE, ("table",)),
    (CatalogCategory.BED, ("bed", "mattress", "matelas")),
    (CatalogCategory.SHELF, ("shelf", "shelv", "bookcase", "cabinet", "storage",
                             "étagère", "etagere", "rangement", "dresser", "wardrobe")),
    (CatalogCategory.MIRROR, ("mirror", "miroir")),
    (CatalogCategory.RUG, ("rug", "carpet", "tapis")),
    (CatalogCategory.PAINT, ("paint", "peinture", "wall color", "wall colour")),
    (CatalogCategory.LAMP, ("lighting", "light")),
]


class CatalogItem(BaseModel):
    id: str
    displayName: str
    category: Optional[str] = None
    # Footprint in cm; defaults match what the catalog reports for unknown sizes
    width: float = Field(default=100.0, gt=0)
    depth: float = Field(default=50.0, gt=0)
    height: float = Field(default=80.0, gt=0)
    referenceImage: Optional[str] = None
    colorName: Optional[str] = None
    colorHex: Optional[str] = None

    @property
    def resolved_category(self) -> CatalogCategory:
        return CatalogCategory.from_text(self.category or self.displayName)
