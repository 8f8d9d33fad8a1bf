import random

import pytest

from conftest import make_item
from storefront.errors import CorruptedCatalogError
from storefront.services.cart import CartRegistry, CartStore, format_key


@pytest.fixture
def pizza():
    return make_item("Hauptgerichte", "pizza", name="Pizza", price="8,00€")


@pytest.fixture
def salad():
    return make_item("Salate", "salad", name="Salad", price="4,50€")


def test_add_inserts_then_increments(pizza):
    cart = CartStore()
    assert cart.add(pizza).quantity == 1
    assert cart.add(pizza).quantity == 2
    assert cart.quantity(pizza.key) == 2
    assert len(cart) == 1


def test_add_refreshes_snapshot(pizza):
    cart = CartStore()
    cart.add(pizza)
    repriced = pizza.model_copy(update={"price": "9,00€", "image_url": "/media/new.png"})
    entry = cart.add(repriced)
    assert entry.quantity == 2
    assert entry.item.price == "9,00€"
    assert entry.item.image_url == "/media/new.png"
    assert cart.total() == "18.00"


def test_scenario_total(pizza, salad):
    cart = CartStore()
    cart.add(pizza)
    cart.add(pizza)
    cart.add(salad)
    assert cart.total() == "20.50"
    assert cart.count() == 3


def test_scenario_double_remove(pizza, salad):
    cart = CartStore()
    cart.add(pizza)
    cart.add(pizza)
    cart.add(salad)

    cart.remove(pizza.key)
    assert cart.quantity(pizza.key) == 1
    cart.remove(pizza.key)
    assert pizza.key not in cart
    assert cart.quantity(salad.key) == 1
    assert cart.total() == "4.50"


def test_remove_missing_key_is_noop(pizza):
    cart = CartStore()
    cart.add(pizza)
    assert cart.remove(("Salate", "nope")) is False
    assert cart.quantity(pizza.key) == 1


def test_same_id_in_two_categories_does_not_collide():
    cart = CartStore()
    cart.add(make_item("Pizza", "1", price="8,00€"))
    cart.add(make_item("Getraenke", "1", price="2,00€"))
    assert len(cart) == 2
    assert cart.total() == "10.00"


def test_total_of_empty_cart():
    assert CartStore().total() == "0.00"


def test_total_surfaces_corrupted_price():
    cart = CartStore()
    cart.add(make_item("Pizza", "x", price="free"))
    with pytest.raises(CorruptedCatalogError):
        cart.total()


def test_clear(pizza, salad):
    cart = CartStore()
    cart.add(pizza)
    cart.add(salad)
    cart.clear()
    assert len(cart) == 0
    assert cart.total() == "0.00"


def test_snapshot_is_detached(pizza):
    cart = CartStore()
    cart.add(pizza)
    snapshot = cart.snapshot()
    cart.add(pizza)
    assert snapshot[pizza.key].quantity == 1


def test_subscribers_are_notified(pizza):
    cart = CartStore()
    seen = []
    unsubscribe = cart.subscribe(lambda store: seen.append(store.count()))
    cart.add(pizza)
    cart.add(pizza)
    cart.remove(pizza.key)
    cart.remove(("x", "y"))
    assert seen == [1, 2, 1]

    unsubscribe()
    cart.clear()
    assert seen == [1, 2, 1]


def test_random_operations_keep_invariants():
    rng = random.Random(1234)
    items = [make_item(c, str(i), price=f"{i},25€") for c in ("A", "B") for i in range(1, 4)]
    cart = CartStore()
    expected: dict = {}

    for _ in range(500):
        item = rng.choice(items)
        if rng.random() < 0.55:
            cart.add(item)
            expected[item.key] = expected.get(item.key, 0) + 1
        else:
            cart.remove(item.key)
            if item.key in expected:
                expected[item.key] -= 1
                if expected[item.key] == 0:
                    del expected[item.key]

        for entry in cart.entries():
            assert entry.quantity >= 1
        assert {k: e.quantity for k, e in cart.snapshot().items()} == expected

    total = sum(q * (int(k[1]) + 0.25) for k, q in expected.items())
    assert cart.total() == f"{total:.2f}"


def test_format_key():
    assert format_key(("Pizza", "margherita")) == "Pizza/margherita"


def test_registry_keeps_one_cart_per_session(pizza):
    carts = CartRegistry()
    carts.get("a").add(pizza)
    assert carts.get("a").count() == 1
    assert carts.get("b").count() == 0
    assert len(carts) == 2


def test_registry_evicts_least_recently_used_cart(pizza):
    carts = CartRegistry(max_sessions=2)
    carts.get("a").add(pizza)
    carts.get("b")
    carts.get("a")
    carts.get("c")

    assert "b" not in carts
    assert "a" in carts and "c" in carts
    assert carts.get("a").count() == 1


def test_registry_release_only_drops_empty_carts(pizza):
    carts = CartRegistry()
    carts.get("a").add(pizza)
    carts.get("b")

    carts.release("a")
    carts.release("b")
    carts.release("unknown")

    assert "a" in carts
    assert "b" not in carts


def test_registry_rejects_zero_capacity():
    with pytest.raises(ValueError):
        CartRegistry(max_sessions=0)


def test_deduct_keeps_lines_added_later(pizza, salad):
    cart = CartStore()
    cart.add(pizza)
    cart.add(pizza)
    ordered = {key: entry.quantity for key, entry in cart.snapshot().items()}

    cart.add(pizza)
    cart.add(salad)
    cart.deduct(ordered)

    assert cart.quantity(pizza.key) == 1
    assert cart.quantity(salad.key) == 1


def test_deduct_removes_fully_ordered_lines(pizza, salad):
    cart = CartStore()
    cart.add(pizza)
    cart.add(salad)
    seen = []
    cart.subscribe(lambda store: seen.append(len(store)))

    cart.deduct({pizza.key: 1, ("Desserts", "tiramisu"): 2})

    assert pizza.key not in cart
    assert seen == [1]

    cart.deduct({pizza.key: 1})
    assert seen == [1]
