from domain.models import Product
from services.scan_service import find_by_short_code, resolve_scan, iter_short_codes, find_collisions
from utils.short_code import generate_short_code


def make_product(product_id, qty, name="Robe"):
    return Product(id=product_id, name=name, price=25000, quantities=dict(qty))


def test_lookup_resolves_product_and_size():
    catalog = [make_product("p1", {"M": 5})]
    match = find_by_short_code(generate_short_code("p1", "M"), catalog)

    assert match is not None
    assert match.product.id == "p1"
    assert match.size == "M"


def test_lookup_trims_scanner_input():
    catalog = [make_product("p1", {"M": 5})]
    code = generate_short_code("p1", "M")

    assert find_by_short_code(f"  {code}\n", catalog).size == "M"


def test_unknown_code_is_not_found():
    catalog = [make_product("p1", {"M": 5})]
    assert find_by_short_code("0000", catalog) is None
    assert find_by_short_code("", catalog) is None
    assert find_by_short_code("0000", []) is None


def test_zero_stock_size_matches_but_is_rejected():
    catalog = [make_product("p1", {"S": 0, "M": 5})]

    match = find_by_short_code(generate_short_code("p1", "S"), catalog)
    assert match is not None and match.size == "S"

    ok, msg, match = resolve_scan(generate_short_code("p1", "S"), catalog)
    assert not ok
    assert msg == "Taille S épuisée"
    assert match.size == "S"

    ok, _, match = resolve_scan(generate_short_code("p1", "M"), catalog)
    assert ok
    assert match.quantity == 5


def test_resolve_scan_not_found_message():
    ok, msg, match = resolve_scan(" 1234 ", [])
    assert not ok
    assert msg == "Produit non trouvé pour le code: 1234"
    assert match is None


def test_first_match_wins_on_collision():
    # two distinct products whose "M" labels share the code 139897
    first = make_product("p329", {"M": 1}, name="Robe Wax")
    second = make_product("p562", {"M": 9}, name="Chemise Lin")
    assert generate_short_code("p329", "M") == generate_short_code("p562", "M") == "139897"

    match = find_by_short_code("139897", [first, second])
    assert (match.product.id, match.size) == ("p329", "M")

    match = find_by_short_code("139897", [second, first])
    assert (match.product.id, match.size) == ("p562", "M")


def test_iter_short_codes_follows_catalog_then_size_order():
    catalog = [make_product("p2", {"XL": 1, "L": 2}), make_product("p1", {"M": 3})]

    pairs = [(p.id, size) for p, size, _ in iter_short_codes(catalog)]
    assert pairs == [("p2", "XL"), ("p2", "L"), ("p1", "M")]


def test_iter_short_codes_skips_blank_sizes():
    catalog = [make_product("p1", {"": 4, "M": 1})]
    assert [size for _, size, _ in iter_short_codes(catalog)] == ["M"]


def test_find_collisions_reports_shared_codes():
    catalog = [make_product("p1", {"M": 1}), make_product("p1", {"M": 2}), make_product("p2", {"S": 1})]

    collisions = find_collisions(catalog)
    assert collisions == {generate_short_code("p1", "M"): [("p1", "M"), ("p1", "M")]}


def test_find_collisions_between_distinct_products():
    catalog = [make_product("p329", {"M": 1}), make_product("p562", {"M": 2}), make_product("p1", {"M": 1})]

    assert find_collisions(catalog) == {"139897": [("p329", "M"), ("p562", "M")]}
