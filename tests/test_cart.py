from decimal import Decimal

from tequilas.client import Cart


def test_add_increments_existing_line():
    empty = Cart()
    one = empty.add(1, "Classic Cheese Pizza", Decimal("9.99"))
    two = one.add(1, "Classic Cheese Pizza", Decimal("9.99"))

    assert empty.is_empty
    assert one.get(1).quantity == 1
    assert two.get(1).quantity == 2
    assert len(two) == 1


def test_operations_return_new_snapshots():
    cart = Cart().add(1, "Classic Cheese Pizza", Decimal("9.99")).add(3, "Coca Cola", Decimal("1.99"))

    bigger = cart.update_quantity(1, 4)
    smaller = cart.remove(3)
    cleared = cart.clear()

    assert cart.get(1).quantity == 1
    assert cart.get(3) is not None
    assert bigger.get(1).quantity == 4
    assert smaller.get(3) is None
    assert cleared.is_empty
    assert len(cart) == 2


def test_quantity_never_drops_below_one():
    cart = Cart().add(5, "Loaded Fries", Decimal("5.49")).update_quantity(5, 0)

    assert cart.get(5).quantity == 1


def test_order_payload_and_estimate():
    cart = (
        Cart()
        .add(1, "Classic Cheese Pizza", Decimal("9.99"))
        .add(3, "Coca Cola", Decimal("1.99"))
        .add(1, "Classic Cheese Pizza", Decimal("9.99"))
    )

    assert cart.to_order_items() == [
        {"productId": 1, "quantity": 2},
        {"productId": 3, "quantity": 1},
    ]
    assert cart.item_count == 3
    assert cart.estimated_total == Decimal("21.97")
