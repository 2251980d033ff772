from pydantic import BaseModel, Field, model_validator
from typing import Literal

from stager.models.catalog import CatalogCategory

# Multipliers to centimetres
UNIT_TO_CM = {"cm": 1.0, "m": 100.0, "ft": 30.48, "in": 2.54}


class RoomSpec(BaseModel):
    width: float = Field(gt=0)
    length: float = Field(gt=0)
    height: float = Field(gt=0)
    wallColor: str = "#f2efe9"
    floorColor: str = "#b48a60"
    unit: Literal["cm", "m", "ft", "in"] = "cm"

    @model_validator(mode="after")
    def normalize_to_cm(self):
        """Store every room in centimetres regardless of the unit it arrived in."""
        if self.unit != "cm":
            scale = UNIT_TO_CM[self.unit]
            self.width *= scale
            self.length *= scale
            self.height *= scale
            self.unit = "cm"
        return self


class Placement(BaseModel):
    itemId: str
    category: CatalogCategory
    x: float
    y: float = 0.0
    z: float
    yaw: float = 0.0
