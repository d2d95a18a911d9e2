"""Domain helpers for recording price observations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import WriteError
from ..models import ProductPrice


def record_price(
    session: Session,
    *,
    product_id: int,
    observed_at: datetime,
    price: int,
) -> None:
    """Persist one price sample for ``product_id``.

    Every call adds a new row; samples are never merged with earlier ones.
    """

    if price < 0:
        raise WriteError(
            f"Refusing negative price {price} for product {product_id}"
        )

    sample = ProductPrice(
        product_id=product_id,
        date=observed_at,
        price=int(price),
    )
    try:
        session.add(sample)
        session.flush()
    except SQLAlchemyError as exc:
        raise WriteError(
            f"Failed to record price for product {product_id} at {observed_at}: {exc}"
        ) from exc
    # Flushed rows are not needed again; keep the identity map small.
    session.expunge(sample)


__all__ = ["record_price"]
