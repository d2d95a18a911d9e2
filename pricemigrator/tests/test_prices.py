from datetime import datetime, timezone

import pytest

from pricemigrator.domain.prices import record_price
from pricemigrator.errors import WriteError
from pricemigrator.models import ProductPrice
from pricemigrator.repositories.identity_repository import IdentityResolver

OBSERVED_AT = datetime(2024, 3, 15, 14, 30, tzinfo=timezone.utc)


def _product(session):
    resolver = IdentityResolver(session)
    category_id = resolver.resolve_category("electronics")
    return resolver.resolve_product("http://a", category_id)


def test_record_price_appends_every_call(session):
    product_id = _product(session)

    record_price(session, product_id=product_id, observed_at=OBSERVED_AT, price=100)
    record_price(session, product_id=product_id, observed_at=OBSERVED_AT, price=100)

    rows = session.query(ProductPrice).filter_by(product_id=product_id).all()
    assert len(rows) == 2
    assert {row.price for row in rows} == {100}
    assert all(row.date.replace(tzinfo=None) == datetime(2024, 3, 15, 14, 30) for row in rows)


def test_record_price_rejects_negative_price(session):
    product_id = _product(session)

    with pytest.raises(WriteError):
        record_price(session, product_id=product_id, observed_at=OBSERVED_AT, price=-1)

    assert session.query(ProductPrice).count() == 0


def test_record_price_unknown_product(session):
    with pytest.raises(WriteError):
        record_price(session, product_id=12345, observed_at=OBSERVED_AT, price=5)
