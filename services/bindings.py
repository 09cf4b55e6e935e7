"""Binding service backed by a flat JSON file.

The file holds the whole binding set as a JSON array. Writes replace the
file in one rename, so readers see either the old or the new set; the last
writer wins.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

from errors import PersistenceError, ValidationError
from logger import get_logger
from models.binding import CategoryBinding

logger = get_logger()


class BindingService:
    """Service for reading and replacing merchant category bindings."""

    def __init__(self, bindings_path: Path):
        """Initialize the binding service.

        Args:
            bindings_path: Location of the JSON bindings file.
        """
        self.bindings_path = Path(bindings_path)

    def find_all(self) -> List[CategoryBinding]:
        """Get every stored binding, in stored order.

        Returns:
            List of CategoryBinding objects; empty if the file does not exist yet.

        Raises:
            PersistenceError: If the file cannot be read or is not a binding list.
        """
        if not self.bindings_path.exists():
            return []

        try:
            with open(self.bindings_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [CategoryBinding.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise PersistenceError(
                f"Failed to read category bindings from {self.bindings_path}: {e}"
            )

    def find(self, merchant_category: str) -> Optional[CategoryBinding]:
        """Get the binding for a merchant category (exact, case-sensitive match)."""
        for binding in self.find_all():
            if binding.merchant_category == merchant_category:
                return binding
        return None

    def replace_all(
        self, bindings: Iterable[Union[CategoryBinding, dict]]
    ) -> List[CategoryBinding]:
        """Replace the whole binding set. Nothing is merged.

        Args:
            bindings: New bindings, as models or in their JSON form.

        Returns:
            The stored bindings.

        Raises:
            ValidationError: If an entry has no merchant category or a merchant
                category appears twice.
            PersistenceError: If the file cannot be written.
        """
        parsed = [_to_binding(b) for b in bindings]

        seen = set()
        for binding in parsed:
            if binding.merchant_category in seen:
                raise ValidationError(
                    f"Duplicate binding for merchant category '{binding.merchant_category}'"
                )
            seen.add(binding.merchant_category)

        self._write([b.to_dict() for b in parsed])
        logger.info(f"Saved {len(parsed)} category bindings")
        return parsed

    def add(self, binding: CategoryBinding) -> CategoryBinding:
        """Append a binding.

        Raises:
            ValidationError: If the merchant category is empty or already bound.
        """
        if not binding.merchant_category:
            raise ValidationError("Merchant category cannot be empty")
        if binding.macro_category is None:
            raise ValidationError("Macro category is required")

        bindings = self.find_all()
        if any(b.merchant_category == binding.merchant_category for b in bindings):
            raise ValidationError(
                "A binding for this merchant category already exists"
            )

        bindings.append(binding)
        self.replace_all(bindings)
        return binding

    def delete(self, merchant_category: str) -> bool:
        """Delete the binding for a merchant category.

        Returns:
            True if a binding was deleted, False if none existed.
        """
        bindings = self.find_all()
        remaining = [b for b in bindings if b.merchant_category != merchant_category]
        if len(remaining) == len(bindings):
            return False

        self.replace_all(remaining)
        return True

    def _write(self, data: list) -> None:
        directory = self.bindings_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=".bindings-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self.bindings_path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(
                f"Failed to write category bindings to {self.bindings_path}: {e}"
            )


def _to_binding(item: Union[CategoryBinding, dict]) -> CategoryBinding:
    if isinstance(item, CategoryBinding):
        return item
    if not isinstance(item, dict) or not item.get("merchantCategory"):
        raise ValidationError(f"Invalid category binding: {item!r}")
    try:
        return CategoryBinding.from_dict(item)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid category binding: {item!r} ({e})")
