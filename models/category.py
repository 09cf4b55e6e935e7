"""Category models for the two-level expense taxonomy."""

from dataclasses import dataclass


@dataclass
class MacroCategory:
    """Top-level spending category, e.g. "Food"."""

    id: int
    name: str

    def to_dict(self) -> dict:
        return {"_id": self.id, "name": self.name}


@dataclass
class MicroCategory:
    """Sub-category nested under a macro category, e.g. "Groceries".

    Attributes:
        id: Unique identifier.
        name: Category name.
        macro_category_id: ID of the parent macro category.
    """

    id: int
    name: str
    macro_category_id: int

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "name": self.name,
            "macroCategory": self.macro_category_id,
        }
