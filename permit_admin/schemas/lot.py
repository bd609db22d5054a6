# permit_admin/schemas/lot.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional


def clamp_available_spots(available_spots: int, total_spots: int) -> int:
    """Keep an available-spot count inside [0, total_spots]."""
    return max(0, min(available_spots, total_spots))


class Lot(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    total_spots: int = Field(gt=0)
    available_spots: int = Field(ge=0)

    @model_validator(mode="after")
    def check_available_within_total(self):
        if self.available_spots > self.total_spots:
            raise ValueError("available_spots cannot exceed total_spots")
        return self

    class Config:
        from_attributes = True


class LotCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    total_spots: int = Field(gt=0)
    available_spots: Optional[int] = Field(default=None, ge=0)   # defaults to total_spots

    @model_validator(mode="after")
    def default_available_to_total(self):
        if self.available_spots is None:
            self.available_spots = self.total_spots
        elif self.available_spots > self.total_spots:
            raise ValueError("available_spots cannot exceed total_spots")
        return self


class LotUpdate(BaseModel):
    """Partial lot edit. available_spots is clamped on apply, not rejected."""

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    total_spots: Optional[int] = Field(default=None, gt=0)
    available_spots: Optional[int] = None

    def apply_to(self, lot: Lot) -> dict:
        """Return the full field set of `lot` after this patch, capacity clamped."""
        changes = self.model_dump(exclude_unset=True)
        merged = lot.model_dump()
        merged.update({k: v for k, v in changes.items() if v is not None or k == "description"})
        merged["available_spots"] = clamp_available_spots(merged["available_spots"], merged["total_spots"])
        return merged
