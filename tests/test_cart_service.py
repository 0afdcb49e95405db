import pytest

from domain.models import Product
from services.cart_service import Cart
from utils.short_code import generate_short_code


@pytest.fixture
def robe():
    return Product(id="p1", name="Robe Wax", price=25000, quantities={"S": 0, "M": 5, "L": 2})


def test_same_pair_merges_into_one_line(robe):
    cart = Cart()
    cart.add(robe, "M")
    cart.add(robe, "M", 2)
    cart.add(robe, "L")

    assert [(line.size, line.quantity) for line in cart] == [("M", 3), ("L", 1)]
    assert cart.items_count() == 4
    assert cart.total() == 100000


def test_add_rejects_zero_quantity(robe):
    with pytest.raises(ValueError):
        Cart().add(robe, "M", 0)


def test_scan_adds_one_unit(robe):
    cart = Cart()
    code = generate_short_code("p1", "M")

    cart.scan(code, [robe])
    ok, _, _ = cart.scan(code, [robe])

    assert ok
    assert cart.lines[0].quantity == 2


def test_scan_rejections_leave_cart_unchanged(robe):
    cart = Cart()

    ok_unknown, _, _ = cart.scan("99999", [robe])
    ok_empty, msg, _ = cart.scan(generate_short_code("p1", "S"), [robe])

    assert not ok_unknown
    assert not ok_empty and msg == "Taille S épuisée"
    assert len(cart) == 0


def test_update_quantity_ignores_values_below_one(robe):
    cart = Cart()
    cart.add(robe, "M", 2)

    cart.update_quantity(0, 0)
    assert cart.lines[0].quantity == 2

    cart.update_quantity(0, 4)
    assert cart.lines[0].quantity == 4


def test_remove_and_clear(robe):
    cart = Cart()
    cart.add(robe, "M")
    cart.add(robe, "L")

    cart.remove(0)
    assert [line.size for line in cart] == ["L"]

    cart.remove(5)
    assert len(cart) == 1

    cart.clear()
    assert len(cart) == 0
    assert cart.total() == 0
