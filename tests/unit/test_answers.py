"""Text answer normalization and checking."""

import pytest

from skillforge.practice.answers import check_answer, normalize_answer, to_number


class TestNormalize:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("  X = 4 ", "4"),
            ("x=4", "4"),
            ("$5x$", "5x"),
            ("2 * x", "2x"),
            ("1 1/4", "5/4"),
            ("-2 1/2", "-5/2"),
            ("12/4", "12/4"),
            ("(X+3)(x-3)", "(x+3)(x-3)"),
            ("x = -2, x = -3", "-2,-3"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert normalize_answer(raw) == expected

    def test_empty(self):
        assert normalize_answer(None) == ""
        assert normalize_answer("") == ""


class TestToNumber:
    def test_fraction(self):
        assert to_number("3/4") == 0.75

    def test_zero_denominator(self):
        assert to_number("3/0") is None

    def test_decimal(self):
        assert to_number("-2.5") == -2.5

    def test_not_a_number(self):
        assert to_number("2x") is None
        assert to_number("inf") is None
        assert to_number("nan") is None


class TestCheckAnswer:
    def test_exact(self):
        assert check_answer("4", "4")

    def test_equation_prefix(self):
        assert check_answer("x = 4", "4")

    def test_roots_with_and_without_prefix(self):
        assert check_answer("-2, -3", "x=-2, x=-3")
        assert check_answer("-2,x=-3", "x=-2, x=-3")
        assert check_answer("x=-2, x=-3", "-2, -3")
        assert not check_answer("-2, -4", "x=-2, x=-3")

    def test_case_and_spaces(self):
        assert check_answer("(X + 2)(X + 3)", "(x+2)(x+3)")

    def test_numeric_equivalence(self):
        assert check_answer("0.5", "1/2")
        assert check_answer("1 1/4", "1.25")
        assert check_answer("0.33333", "1/3")

    def test_outside_tolerance(self):
        assert not check_answer("0.333", "1/3")

    def test_wrong(self):
        assert not check_answer("5", "4")
        assert not check_answer("(x+3)(x+2)", "(x+2)(x+3)")

    def test_blank_is_wrong(self):
        assert not check_answer("", "4")
        assert not check_answer("   ", "4")
        assert not check_answer(None, "4")
