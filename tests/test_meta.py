"""Tests for heading properties and drawer value decoding."""

from marginalia.adapters.yaml_codec import YamlFrontmatter, decode_value
from marginalia.core.meta import PropertyBag


def test_property_bag_is_case_insensitive():
    props = PropertyBag({"noter_page": "3"})

    assert props["NOTER_PAGE"] == "3"
    assert "Noter_Page" in props
    assert list(props) == ["NOTER_PAGE"]

    props["noter_document"] = "book.pdf"
    del props["NOTER_PAGE"]
    assert dict(props) == {"NOTER_DOCUMENT": "book.pdf"}
    assert 3 not in props


def test_get_str_skips_blank_values():
    props = PropertyBag({"A": "  value  ", "B": "   ", "C": 4})

    assert props.get_str("a") == "value"
    assert props.get_str("b") is None
    assert props.get_str("c", "fallback") == "fallback"
    assert props.get_str("missing") is None


def test_decode_value():
    """Drawer values are read as YAML scalars or flow sequences."""
    assert decode_value("[start, scroll]") == ["start", "scroll"]
    assert decode_value("0.3") == 0.3
    assert decode_value("true") is True
    assert decode_value("disable") == "disable"
    assert decode_value("[0.3, 0.7]") == [0.3, 0.7]
    assert decode_value(None) is None
    assert decode_value("[unclosed") == "[unclosed"


def test_frontmatter_is_split_from_outline():
    codec = YamlFrontmatter()

    meta, body = codec.decode("---\ntitle: Reading log\ntags: [books]\n---\n# Book\n")
    assert meta == {"title": "Reading log", "tags": ["books"]}
    assert body == "# Book\n"
    assert codec.decode("# No header\n") == ({}, "# No header\n")


def test_frontmatter_that_is_not_a_mapping_is_body():
    codec = YamlFrontmatter()

    for text in ("---\n- a\n- b\n---\n# Book\n", "---\nkey: [unclosed\n---\n# Book\n"):
        assert codec.decode(text) == ({}, text)
