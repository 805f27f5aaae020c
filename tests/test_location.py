"""Tests for location values and their comparison."""

import itertools

import pytest

from marginalia.core.location import Location, compare, to_location


def test_location_defaults():
    """Top and left default to zero."""
    loc = Location(3)
    assert loc.key() == (3, 0.0, 0.0)


@pytest.mark.parametrize("args", [(-1,), (1, 1.5), (1, 0.5, -0.1)])
def test_location_rejects_out_of_range(args):
    """Negative pages and fractions outside [0, 1] are invalid."""
    with pytest.raises(ValueError):
        Location(*args)


def test_to_location_accepts_location_like_values():
    """Ints and short tuples normalize to Location."""
    assert to_location(4) == Location(4)
    assert to_location((4, 0.25)) == Location(4, 0.25)
    assert to_location([4, 0.25, 0.5]) == Location(4, 0.25, 0.5)
    assert to_location(Location(2)) == Location(2)
    assert to_location("4") is None
    assert to_location(True) is None
    assert to_location((1, 2, 3, 4)) is None


def test_lexicographic_order():
    """Page first, then top, then left."""
    a = Location(1, 0.9, 0.9)
    b = Location(2, 0.0, 0.0)
    c = Location(2, 0.5, 0.0)
    d = Location(2, 0.5, 0.3)

    assert compare("<", a, b)
    assert compare("<", b, c)
    assert compare("<", c, d)
    assert compare(">", d, a)
    assert compare("<=", c, c)
    assert compare(">=", c, c)
    assert compare("=", c, Location(2, 0.5))
    assert not compare("=", c, d)


def test_strict_total_order():
    """Exactly one of <, =, > holds for every pair, consistently with <= and >=."""
    locations = [
        Location(p, t, l)
        for p in (0, 1, 2)
        for t in (0.0, 0.5)
        for l in (0.0, 0.5)
    ]
    for x, y in itertools.product(locations, repeat=2):
        outcomes = [compare("<", x, y), compare("=", x, y), compare(">", x, y)]
        assert outcomes.count(True) == 1
        assert compare("<=", x, y) == (outcomes[0] or outcomes[1])
        assert compare(">=", x, y) == (outcomes[2] or outcomes[1])


def test_first_on_page_prefers_later_page():
    """Any location on a later page wins."""
    assert compare("firstOnPage", Location(5, 0.9), Location(4, 0.1))
    assert not compare("firstOnPage", Location(4, 0.1), Location(5, 0.9))


def test_first_on_page_prefers_earlier_spot_on_same_page():
    """On the same page the earlier spot wins, unlike plain >."""
    early = Location(4, 0.1)
    late = Location(4, 0.9)

    assert compare("firstOnPage", early, late)
    assert not compare("firstOnPage", late, early)
    assert not compare(">", early, late)


def test_first_on_page_breaks_ties_on_left():
    assert compare("firstOnPage", Location(4, 0.5, 0.1), Location(4, 0.5, 0.7))
    assert not compare("firstOnPage", Location(4, 0.5, 0.7), Location(4, 0.5, 0.1))
    assert not compare("firstOnPage", Location(4, 0.5, 0.1), Location(4, 0.5, 0.1))


def test_first_on_page_is_not_the_reverse_of_less_than():
    """The relation is not a reversed lexicographic order."""
    a = Location(4, 0.1)
    b = Location(4, 0.9)
    c = Location(5, 0.5)
    assert compare("firstOnPage", a, b) and compare("firstOnPage", c, a)
    assert compare("<", a, b) and not compare("<", c, a)


def test_null_locations():
    """A null first operand never matches; a null second operand is always beaten."""
    loc = Location(1)
    for op in ("=", "<", "<=", ">", ">=", "firstOnPage"):
        assert not compare(op, None, loc)
        assert compare(op, loc, None)
        assert not compare(op, None, None)


def test_compare_uses_normalizer():
    """The normalizer lets location-like values join the order."""

    def normalize(value):
        if isinstance(value, dict):
            return Location(value["chapter"], value["pos"])
        return to_location(value)

    assert compare("<", {"chapter": 2, "pos": 0.3}, (2, 0.4), normalize)
    assert compare("=", {"chapter": 2, "pos": 0.3}, Location(2, 0.3), normalize)


def test_unknown_operator():
    with pytest.raises(ValueError):
        compare("<>", Location(1), Location(2))
