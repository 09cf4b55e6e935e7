"""CategoryBinding model mapping bank merchant categories to our categories."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CategoryBinding:
    """Remembered categorization for a merchant category label.

    Attributes:
        merchant_category: Label exactly as it appears in bank exports (unique key).
        macro_category: ID of the macro category to pre-select.
        micro_category: ID of the micro category to pre-select, if any.
    """

    merchant_category: str
    macro_category: Optional[int]
    micro_category: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CategoryBinding":
        """Build a binding from its stored/JSON form.

        Empty strings are how the UI sends "not selected".
        """
        return cls(
            merchant_category=data["merchantCategory"],
            macro_category=_optional_id(data.get("macroCategory")),
            micro_category=_optional_id(data.get("microCategory")),
        )

    def to_dict(self) -> dict:
        """Convert binding to its stored/JSON form."""
        return {
            "merchantCategory": self.merchant_category,
            "macroCategory": self.macro_category,
            "microCategory": self.micro_category,
        }


def _optional_id(value) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)
