"""Category service for the macro/micro category tables."""

import sqlite3
from typing import List, Optional

import yaml

from errors import PersistenceError, ValidationError
from logger import get_logger
from models.category import MacroCategory, MicroCategory

logger = get_logger()


class CategoryService:
    """Service for managing macro and micro categories."""

    def __init__(self, db_manager):
        """Initialize the category service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find_all_macro(self) -> List[MacroCategory]:
        """Get all macro categories, ordered by id."""
        with self.db_manager.connect() as conn:
            rows = conn.execute(
                "SELECT id, name FROM macro_categories ORDER BY id"
            ).fetchall()
        return [MacroCategory(id=row[0], name=row[1]) for row in rows]

    def find_all_micro(self) -> List[MicroCategory]:
        """Get all micro categories, ordered by id."""
        with self.db_manager.connect() as conn:
            rows = conn.execute(
                "SELECT id, name, macro_id FROM micro_categories ORDER BY id"
            ).fetchall()
        return [
            MicroCategory(id=row[0], name=row[1], macro_category_id=row[2])
            for row in rows
        ]

    def find_macro(self, macro_id: int) -> Optional[MacroCategory]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT id, name FROM macro_categories WHERE id = ?", (macro_id,)
            ).fetchone()
        return MacroCategory(id=row[0], name=row[1]) if row else None

    def find_micro(self, micro_id: int) -> Optional[MicroCategory]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT id, name, macro_id FROM micro_categories WHERE id = ?",
                (micro_id,),
            ).fetchone()
        if row:
            return MicroCategory(id=row[0], name=row[1], macro_category_id=row[2])
        return None

    def create_macro(self, name: str, macro_id: Optional[int] = None) -> MacroCategory:
        """Create a macro category.

        Args:
            name: Category name.
            macro_id: Explicit ID; SQLite picks the next one when None.

        Raises:
            sqlite3.IntegrityError: If the ID is already taken.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO macro_categories (id, name) VALUES (?, ?)",
                (macro_id, name),
            )
            conn.commit()
            return MacroCategory(id=cursor.lastrowid, name=name)

    def create_micro(
        self, name: str, macro_id: int, micro_id: Optional[int] = None
    ) -> MicroCategory:
        """Create a micro category under an existing macro category.

        Raises:
            ValidationError: If the parent macro category does not exist.
            sqlite3.IntegrityError: If the ID is already taken.
        """
        if self.find_macro(macro_id) is None:
            raise ValidationError(f"Macro category with ID {macro_id} not found")

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO micro_categories (id, name, macro_id) VALUES (?, ?, ?)",
                (micro_id, name, macro_id),
            )
            conn.commit()
            return MicroCategory(
                id=cursor.lastrowid, name=name, macro_category_id=macro_id
            )

    def list_categories(self) -> dict:
        """Get both category levels in the shape the import UI consumes.

        Returns:
            ``{"macroCategories": [{_id, name}], "microCategories": [{_id, name, macroCategory}]}``

        Raises:
            PersistenceError: If the categories cannot be read.
        """
        try:
            macros = self.find_all_macro()
            micros = self.find_all_micro()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to fetch categories: {e}")

        return {
            "macroCategories": [m.to_dict() for m in macros],
            "microCategories": [m.to_dict() for m in micros],
        }

    def seed(self, source) -> int:
        """Load a category taxonomy from YAML, replacing existing categories.

        Expected document::

            - id: 1
              name: Food
              micro:
                - id: 10
                  name: Groceries

        Args:
            source: YAML text or an open stream.

        Returns:
            Number of categories (macro + micro) written.

        Raises:
            ValidationError: If the document does not have the expected shape.
            PersistenceError: If the categories cannot be written.
        """
        try:
            data = yaml.safe_load(source)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid category file: {e}")

        macros, micros = _parse_taxonomy(data)

        try:
            with self.db_manager.connect() as conn:
                try:
                    conn.execute("DELETE FROM micro_categories")
                    conn.execute("DELETE FROM macro_categories")
                    conn.executemany(
                        "INSERT INTO macro_categories (id, name) VALUES (?, ?)",
                        [(m.id, m.name) for m in macros],
                    )
                    conn.executemany(
                        "INSERT INTO micro_categories (id, name, macro_id) VALUES (?, ?, ?)",
                        [(m.id, m.name, m.macro_category_id) for m in micros],
                    )
                    conn.commit()
                except sqlite3.Error:
                    conn.rollback()
                    raise
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to seed categories: {e}")

        logger.info(
            f"Seeded {len(macros)} macro and {len(micros)} micro categories"
        )
        return len(macros) + len(micros)


def _parse_taxonomy(data) -> tuple:
    if not isinstance(data, list):
        raise ValidationError("Category file must contain a list of macro categories")

    macros = []
    micros = []
    for entry in data:
        if not isinstance(entry, dict) or "id" not in entry or "name" not in entry:
            raise ValidationError(f"Invalid macro category entry: {entry!r}")
        macro = MacroCategory(id=int(entry["id"]), name=str(entry["name"]))
        macros.append(macro)

        for child in entry.get("micro") or []:
            if not isinstance(child, dict) or "id" not in child or "name" not in child:
                raise ValidationError(f"Invalid micro category entry: {child!r}")
            micros.append(
                MicroCategory(
                    id=int(child["id"]),
                    name=str(child["name"]),
                    macro_category_id=macro.id,
                )
            )

    return macros, micros
