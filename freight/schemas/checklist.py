from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class ChecklistItemOut(BaseModel):
    id: int
    category: Optional[str] = None
    name: str
    icon: Optional[str] = None
    has_extra_fee: bool
    base_extra_fee: Decimal
    requires_extra_input: bool
    extra_input_label: Optional[str] = None
    sort_order: Optional[int] = None
