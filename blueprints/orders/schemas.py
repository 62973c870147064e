from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from models import Drink, Sugar, Slot

class OrderItemIn(BaseModel):
    # client-side cart ids are accepted but not persisted
    id: Optional[str] = None
    drink: Drink
    sugar: Sugar = Sugar.WITHOUT_SUGAR
    quantity: int = Field(default=1, ge=1)
    note: Optional[str] = Field(None, max_length=200)

    @field_validator("note")
    @classmethod
    def _blank_note(cls, v: Optional[str]):
        if v is None:
            return None
        return v.strip() or None

class OrderItemsIn(BaseModel):
    items: List[OrderItemIn] = Field(min_length=1)

class PlaceOrderIn(OrderItemsIn):
    slot: Optional[Slot] = None
    slots: Optional[List[Slot]] = None

    @model_validator(mode="after")
    def _one_slot_at_least(self):
        if self.slot is None and not self.slots:
            raise ValueError("slot_required")
        if self.slot is not None and self.slots:
            raise ValueError("use_slot_or_slots")
        return self

    def selected_slots(self) -> List[Slot]:
        if self.slot is not None:
            return [self.slot]
        seen: List[Slot] = []
        for s in self.slots or []:
            if s not in seen:
                seen.append(s)
        return seen
