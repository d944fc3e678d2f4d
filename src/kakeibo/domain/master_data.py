"""Master data (subcategories and merchants) domain service."""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from kakeibo.domain.catalog import MerchantDirectory, SubcategoryCatalog, SubcategoryNode
from kakeibo.domain.entities import CategoryType, Merchant, Subcategory
from kakeibo.domain.errors import ValidationError

if TYPE_CHECKING:
    from kakeibo.database.base import Database

logger = logging.getLogger(__name__)


class MasterDataService:
    """Service for seeding and browsing subcategories and merchants."""

    def __init__(self, db: "Database"):
        """Initialize master data service.

        Args:
            db: Database instance
        """
        self.db = db

    def has_master_data(self) -> bool:
        return bool(self.db.list_subcategories())

    def seed(
        self, subcategories: Iterable[Subcategory], merchants: Iterable[Merchant]
    ) -> tuple[int, int]:
        """Validate and store subcategories and merchants.

        The combined data is validated as a whole before anything is written:
        the tree invariants, a single DEFAULT per category, unique merchant
        keys, and merchant defaults pointing at existing subcategories.

        Returns:
            Tuple of (subcategory count, merchant count)

        Raises:
            ValidationError: If the data is inconsistent
        """
        subcategories = list(subcategories)
        merchants = list(merchants)
        existing = {s.id: s for s in self.db.list_subcategories()}
        existing.update({s.id: s for s in subcategories})
        catalog = SubcategoryCatalog(existing.values())
        for category_type in CategoryType:
            defaults = [s for s in catalog.list_by_category(category_type) if s.is_default]
            if len(defaults) > 1:
                raise ValidationError(
                    f"Category {category_type.value} has {len(defaults)} default subcategories"
                )
        MerchantDirectory(merchants)
        for merchant in merchants:
            if merchant.default_subcategory_id not in catalog:
                raise ValidationError(
                    f"Merchant '{merchant.id}' points at unknown subcategory "
                    f"'{merchant.default_subcategory_id}'"
                )

        # Parents first so the stored tree is always consistent.
        for sub in sorted(subcategories, key=lambda s: s.parent_id is not None):
            self.db.save_subcategory(sub)
        for merchant in merchants:
            self.db.save_merchant(merchant)
        logger.info("Seeded %d subcategories and %d merchants", len(subcategories), len(merchants))
        return len(subcategories), len(merchants)

    def subcategory_tree(self, category_type: Optional[CategoryType] = None) -> list[SubcategoryNode]:
        """Build the active subcategory tree."""
        return SubcategoryCatalog(self.db.list_subcategories()).build_tree(category_type)

    def list_merchants(self) -> list[Merchant]:
        return self.db.list_merchants()
