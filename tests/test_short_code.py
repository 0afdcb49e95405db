import re

import pytest

from utils.short_code import generate_short_code, string_hash


def test_known_code_for_p1_m():
    assert generate_short_code("p1", "M") == "557603"


def test_same_inputs_same_code():
    assert generate_short_code("a8f0c2", "XL") == generate_short_code("a8f0c2", "XL")


@pytest.mark.parametrize(
    "product_id, size",
    [
        ("p1", "S"),
        ("p1", "XL"),
        ("3f2b7a1e-8c4d-4b8e-9a51-0c7d2e6f1a90", "2XL"),
        ("42", "Taille unique"),
        ("x", "é"),
        ("robe-👗", "M"),
    ],
)
def test_code_is_four_to_six_digits(product_id, size):
    assert re.fullmatch(r"\d{4,6}", generate_short_code(product_id, size))


def test_sizes_of_one_product_get_different_codes():
    codes = {generate_short_code("p1", size) for size in ("S", "M", "L", "XL", "2XL")}
    assert len(codes) == 5


def test_hash_wraps_to_signed_32_bits():
    h = string_hash("p1:SIZE:M:1")
    assert h == -557680924
    assert -(2 ** 31) <= string_hash("x" * 200) < 2 ** 31


def test_empty_hash_is_zero():
    assert string_hash("") == 0


@pytest.mark.parametrize("product_id, size", [("", "M"), ("p1", ""), (None, "M"), ("p1", None)])
def test_rejects_empty_inputs(product_id, size):
    with pytest.raises(ValueError):
        generate_short_code(product_id, size)
