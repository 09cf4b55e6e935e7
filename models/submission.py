"""Request schema for records confirmed in the import UI."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SubmittedRecord(BaseModel):
    """One confirmed record. A negative amount marks an income."""

    model_config = ConfigDict(extra="ignore")

    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    description: str = Field(min_length=1)
    amount: Decimal
    macroCategory: Optional[int] = None
    microCategory: int

    @field_validator("macroCategory", mode="before")
    @classmethod
    def blank_as_none(cls, value):
        # The UI sends "" for "not selected"
        if value == "":
            return None
        return value

    @property
    def is_income(self) -> bool:
        return self.amount < 0
