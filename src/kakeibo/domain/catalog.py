"""Read-only snapshots of reference data used by the classifier.

The snapshots are built once from whatever the persistence layer returns
and then passed explicitly into the engines, so classification stays a pure
function of its inputs.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from kakeibo.domain import errors
from kakeibo.domain.entities import CategoryType, Merchant, Subcategory, Transaction
from kakeibo.domain.errors import NotFoundError, ValidationError
from kakeibo.utils.text_normalizer import normalize_text


@dataclass(frozen=True)
class SubcategoryNode:
    """Subcategory with its children, for tree views."""

    subcategory: Subcategory
    children: tuple["SubcategoryNode", ...] = field(default_factory=tuple)


class SubcategoryCatalog:
    """Snapshot of the subcategory tree."""

    def __init__(self, subcategories: Iterable[Subcategory]):
        """Build the catalog and validate the tree.

        Args:
            subcategories: All subcategories, active or not

        Raises:
            ValidationError: If ids repeat, a parent is missing, or a child's
                category type differs from its parent's
        """
        self._by_id: dict[str, Subcategory] = {}
        for sub in subcategories:
            if sub.id in self._by_id:
                raise ValidationError(f"Duplicate subcategory id '{sub.id}'")
            self._by_id[sub.id] = sub

        for sub in self._by_id.values():
            if sub.parent_id is None:
                continue
            parent = self._by_id.get(sub.parent_id)
            if parent is None:
                raise ValidationError(
                    f"Parent '{sub.parent_id}' of subcategory '{sub.id}' does not exist"
                )
            if parent.category_type != sub.category_type:
                raise ValidationError(
                    errors.category_type_mismatch(
                        sub.id, parent.category_type.value, sub.category_type.value
                    )
                )

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, subcategory_id: str) -> bool:
        return subcategory_id in self._by_id

    def get(self, subcategory_id: str) -> Optional[Subcategory]:
        return self._by_id.get(subcategory_id)

    def belongs_to(self, subcategory_id: str, category_type: CategoryType) -> bool:
        """Return True if the subcategory exists, is active and has the given type."""
        sub = self._by_id.get(subcategory_id)
        return sub is not None and sub.is_active and sub.category_type == category_type

    def list_by_category(self, category_type: CategoryType) -> list[Subcategory]:
        """Active subcategories of a category, in display order."""
        subs = [
            s for s in self._by_id.values()
            if s.category_type == category_type and s.is_active
        ]
        return sorted(subs, key=lambda s: (s.display_order, s.id))

    def default_for(self, category_type: CategoryType) -> Subcategory:
        """Return the DEFAULT subcategory of a category.

        Raises:
            NotFoundError: If the category has no active default
        """
        for sub in self.list_by_category(category_type):
            if sub.is_default:
                return sub
        raise NotFoundError(errors.default_subcategory_not_found(category_type.value))

    def build_tree(self, category_type: Optional[CategoryType] = None) -> list[SubcategoryNode]:
        """Build top-level nodes with their children, ordered by display order."""
        subs = [s for s in self._by_id.values() if s.is_active]
        if category_type is not None:
            subs = [s for s in subs if s.category_type == category_type]

        def order(items):
            return sorted(items, key=lambda s: (s.category_type.value, s.display_order, s.id))

        children: dict[str, list[Subcategory]] = {}
        for sub in subs:
            if sub.parent_id is not None:
                children.setdefault(sub.parent_id, []).append(sub)

        return [
            SubcategoryNode(
                subcategory=root,
                children=tuple(SubcategoryNode(c) for c in order(children.get(root.id, []))),
            )
            for root in order(s for s in subs if s.parent_id is None)
        ]


class MerchantDirectory:
    """Snapshot of the merchant directory keyed by normalized name and alias."""

    def __init__(self, merchants: Iterable[Merchant]):
        """Index merchants by normalized name and aliases.

        Raises:
            ValidationError: If a name or alias normalizes to a key already
                claimed by a different merchant
        """
        self._merchants: dict[str, Merchant] = {}
        self._names: dict[str, Merchant] = {}
        self._aliases: dict[str, Merchant] = {}
        for merchant in merchants:
            self._merchants[merchant.id] = merchant
            self._index(self._names, normalize_text(merchant.name), merchant)
            for alias in merchant.aliases:
                self._index(self._aliases, normalize_text(alias), merchant)

        for key, merchant in self._aliases.items():
            other = self._names.get(key)
            if other is not None and other.id != merchant.id:
                raise ValidationError(errors.duplicate_merchant_key(key, other.id, merchant.id))

    @staticmethod
    def _index(index: dict[str, Merchant], key: str, merchant: Merchant) -> None:
        if not key:
            return
        existing = index.get(key)
        if existing is not None and existing.id != merchant.id:
            raise ValidationError(errors.duplicate_merchant_key(key, existing.id, merchant.id))
        index[key] = merchant

    def __len__(self) -> int:
        return len(self._merchants)

    def get(self, merchant_id: str) -> Optional[Merchant]:
        return self._merchants.get(merchant_id)

    def lookup(self, normalized_name: str) -> Optional[Merchant]:
        """Find a merchant by its normalized canonical name."""
        return self._names.get(normalized_name)

    def find_by_alias(self, normalized_alias: str) -> Optional[Merchant]:
        """Find a merchant by a normalized alias."""
        return self._aliases.get(normalized_alias)


@dataclass(frozen=True)
class ClassificationContext:
    """Reference data a classification run reads from."""

    catalog: SubcategoryCatalog
    directory: MerchantDirectory
    history: tuple[Transaction, ...] = ()
