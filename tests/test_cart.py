from __future__ import annotations

import random
from decimal import Decimal

import pytest

from mediatech_client import CartAggregator, Product, ValidationError


def _product(product_id: int, unit_price: str = "10") -> Product:
    return Product(id=product_id, label=f"Product {product_id}", unit_price=Decimal(unit_price))


def test_adding_same_product_twice_increments_quantity() -> None:
    cart = CartAggregator()
    mouse = _product(3)

    cart.add_item(mouse)
    cart.add_item(mouse)

    lines = cart.items()
    assert len(lines) == 1
    assert lines[0].product_id == 3
    assert lines[0].quantity == 2


def test_count_and_total() -> None:
    cart = CartAggregator()
    cart.add_item(_product(3, "10"))
    cart.add_item(_product(3, "10"))
    cart.add_item(_product(5, "4"))

    assert [(line.product_id, line.quantity) for line in cart.items()] == [(3, 2), (5, 1)]
    assert cart.count == 3
    assert cart.total == Decimal("24")


def test_remove_missing_product_is_noop() -> None:
    cart = CartAggregator()
    cart.add_item(_product(1))
    seen = []
    cart.subscribe(seen.append)

    cart.remove_item(99)

    assert cart.count == 1
    assert len(seen) == 1


def test_random_mutations_keep_one_line_per_product() -> None:
    rng = random.Random(1234)
    cart = CartAggregator()
    products = [_product(pid, str(pid)) for pid in range(1, 6)]
    for _ in range(500):
        if rng.random() < 0.7:
            cart.add_item(rng.choice(products))
        else:
            cart.remove_item(rng.randint(1, 6))
        ids = [line.product_id for line in cart.items()]
        assert len(ids) == len(set(ids))
        assert cart.count == sum(line.quantity for line in cart.items())
        assert all(line.quantity > 0 for line in cart.items())


def test_listeners_see_post_mutation_state_in_subscription_order() -> None:
    cart = CartAggregator()
    calls: list[tuple[str, int, int]] = []
    cart.subscribe(lambda lines: calls.append(("first", len(lines), cart.count)))
    cart.subscribe(lambda lines: calls.append(("second", len(lines), cart.count)))

    cart.add_item(_product(1))
    cart.add_item(_product(1))
    cart.clear()

    assert calls == [
        ("first", 1, 1),
        ("second", 1, 1),
        ("first", 1, 2),
        ("second", 1, 2),
        ("first", 0, 0),
        ("second", 0, 0),
    ]


def test_unsubscribe_stops_notifications() -> None:
    cart = CartAggregator()
    seen = []
    subscription = cart.subscribe(seen.append)
    cart.add_item(_product(1))

    subscription.unsubscribe()
    cart.add_item(_product(2))

    assert len(seen) == 1
    assert not subscription.active


def test_items_snapshot_is_not_live() -> None:
    cart = CartAggregator()
    cart.add_item(_product(1))
    snapshot = cart.items()

    cart.add_item(_product(1))

    assert snapshot[0].quantity == 1
    assert isinstance(snapshot, tuple)


def test_product_without_id_is_rejected() -> None:
    cart = CartAggregator()
    with pytest.raises(ValidationError):
        cart.add_item(Product(label="Loose item"))
    assert cart.is_empty()
