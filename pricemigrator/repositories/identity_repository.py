"""
Get-or-create resolution of categories and products.

All lookups and inserts run on the caller's session; new rows are flushed,
not committed, so later lookups in the same transaction can see them.
"""
from __future__ import annotations

import logging
from typing import Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import IdentityResolutionError
from ..models import Category, Product


logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolve natural keys to ids, creating missing rows on the way.

    The check-then-insert sequence is only safe while a single session is the
    sole writer; a concurrent variant needs an atomic upsert instead.
    """

    def __init__(self, db: Session):
        self.db = db
        self._category_cache: Dict[str, int] = {}
        self.categories_created = 0
        self.products_created = 0

    def resolve_category(self, name: str) -> int:
        """Return the id of category ``name``, creating it when missing."""
        cached = self._category_cache.get(name)
        if cached is not None:
            return cached

        try:
            category_id = (
                self.db.query(Category.id).filter(Category.name == name).scalar()
            )
            if category_id is None:
                category = Category(name=name)
                self.db.add(category)
                self.db.flush()
                category_id = category.id
                self.categories_created += 1
                logger.info("Created category %s (id=%s)", name, category_id)
        except SQLAlchemyError as exc:
            raise IdentityResolutionError(
                f"Failed to resolve category {name!r}: {exc}"
            ) from exc

        self._category_cache[name] = category_id
        return category_id

    def resolve_product(self, url: str, category_id: int) -> int:
        """Return the id of the product at ``url``, creating it when missing.

        An existing product keeps the category it was first created with.
        """
        try:
            product_id = self.db.query(Product.id).filter(Product.url == url).scalar()
            if product_id is not None:
                return product_id

            product = Product(url=url, category_id=category_id)
            self.db.add(product)
            self.db.flush()
        except SQLAlchemyError as exc:
            raise IdentityResolutionError(
                f"Failed to resolve product {url!r}: {exc}"
            ) from exc

        self.products_created += 1
        product_id = product.id
        self.db.expunge(product)
        return product_id
