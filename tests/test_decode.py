from receiptmark.decode import decode, expand_indent
from receiptmark.rules import SENTINEL_KEY


def test_flat_scalars():
    tree = decode("jurisdiction: St. Louis County, MO\nreceipt_version: 1\nurl: https://example.org/a?b=c")
    assert tree == {
        "jurisdiction": "St. Louis County, MO",
        "receipt_version": 1,
        "url": "https://example.org/a?b=c",
    }


def test_nested_mapping():
    tree = decode("entity:\n  type: school\n  name: Example High\n")
    assert tree == {"entity": {"type": "school", "name": "Example High"}}


def test_list_of_scalars():
    assert decode("tags:\n  - a\n  - b") == {"tags": ["a", "b"]}


def test_list_of_objects_with_nested_properties():
    markup = (
        "violations:\n"
        "  - code: C1\n"
        "    title: Improper storage\n"
        "    critical: true\n"
        "  - code: N1\n"
        "    title: Minor labeling\n"
        "    critical: false\n"
    )
    tree = decode(markup)
    assert tree == {
        "violations": [
            {"code": "C1", "title": "Improper storage", "critical": True},
            {"code": "N1", "title": "Minor labeling", "critical": False},
        ]
    }
    assert list(tree["violations"][0]) == ["code", "title", "critical"]


def test_dedent_returns_to_parent_mapping():
    markup = (
        "entity:\n"
        "  name: Clayton High School\n"
        "  address: 1 Mark Twain Cir\n"
        "inspection:\n"
        "  score: 96\n"
        "  violations:\n"
        "    - code: 4-601.11\n"
        "      critical: false\n"
        "proof:\n"
        "  cid: bafy123\n"
    )
    assert decode(markup) == {
        "entity": {"name": "Clayton High School", "address": "1 Mark Twain Cir"},
        "inspection": {"score": 96, "violations": [{"code": "4-601.11", "critical": False}]},
        "proof": {"cid": "bafy123"},
    }


def test_tab_and_four_spaces_parse_identically():
    with_tab = decode("entity:\n\ttype: school\n\tname: Example High")
    with_spaces = decode("entity:\n    type: school\n    name: Example High")
    assert with_tab == with_spaces == {"entity": {"type": "school", "name": "Example High"}}


def test_interior_tabs_are_content():
    assert expand_indent("\tkey: a\tb") == "    key: a\tb"
    assert decode("key: a\tb") == {"key": "a\tb"}


def test_bare_key_without_block_is_null():
    assert decode("parent:\nname: x") == {"parent": None, "name": "x"}
    assert decode("grade_raw:") == {"grade_raw": None}


def test_null_literal():
    assert decode("grade_raw: null") == {"grade_raw": None}


def test_colon_inside_value_is_not_split():
    assert decode("title: Note: see page 2") == {"title": "Note: see page 2"}


def test_list_item_splits_on_first_delimiter_only():
    assert decode("items:\n  - note: a: b") == {"items": [{"note": "a: b"}]}


def test_quoted_list_item_is_not_split():
    assert decode('items:\n  - "a: b"') == {"items": ["a: b"]}


def test_list_without_pending_key_uses_sentinel():
    assert decode("- a\n- b") == {SENTINEL_KEY: ["a", "b"]}


def test_sentinel_after_closed_block():
    markup = "entity:\n  name: x\n- stray"
    assert decode(markup) == {"entity": {"name": "x"}, SENTINEL_KEY: ["stray"]}


def test_deeper_list_replaces_scalar_at_pending_key():
    assert decode("tags: none\n  - a") == {"tags": ["a"]}


def test_compact_list_at_key_indent():
    markup = "tags:\n- a\n- b\nnext: 1"
    assert decode(markup) == {"tags": ["a", "b"], "next": 1}


def test_unrecognized_lines_are_ignored():
    markup = "name: x\njust some words\n-\nscore: 3"
    assert decode(markup) == {"name": "x", "score": 3}


def test_blank_lines_and_crlf():
    assert decode("a: 1\r\n\r\n\r\nb:\r\n  c: 2\r\n") == {"a": 1, "b": {"c": 2}}


def test_reassigned_key_overwrites():
    tree = decode("a: 1\nb: 2\na: 3")
    assert tree == {"a": 3, "b": 2}
    assert list(tree) == ["a", "b"]


def test_literal_block():
    markup = (
        "narrative: |-\n"
        "  Raw chicken stored above\n"
        "\n"
        "    ready-to-eat produce.\n"
        "next: x\n"
    )
    assert decode(markup) == {
        "narrative": "Raw chicken stored above\n\n  ready-to-eat produce.",
        "next": "x",
    }


def test_literal_block_inside_list_item():
    markup = (
        "violations:\n"
        "  - code: C1\n"
        "    narrative: |-\n"
        "      line one\n"
        "      line two\n"
        "    critical: true\n"
    )
    assert decode(markup) == {
        "violations": [
            {"code": "C1", "narrative": "line one\nline two", "critical": True},
        ]
    }


def test_list_item_opening_nested_mapping():
    markup = "rows:\n  - entity:\n      name: x\n    score: 1"
    assert decode(markup) == {"rows": [{"entity": {"name": "x"}, "score": 1}]}


def test_nested_sequences():
    markup = "m:\n  - - 1\n    - 2\n  - - 3"
    assert decode(markup) == {"m": [[1, 2], [3]]}


def test_empty_input():
    assert decode("") == {}
    assert decode("\n  \n") == {}


def test_each_call_gets_a_fresh_tree():
    first = decode("a: 1")
    first["a"] = 2
    assert decode("a: 1") == {"a": 1}


def test_deeply_nested_sequence_on_one_line():
    tree = decode("k:\n  " + "- " * 3000 + "x")

    node = tree["k"]
    depth = 0
    while isinstance(node, list):
        assert len(node) == 1
        node = node[0]
        depth += 1
    assert depth == 3000
    assert node == "x"


def test_literal_block_keeps_leading_tab_in_content():
    markup = "narrative: |-\n  first\n  \tindented with tab\nnext: 1"
    assert decode(markup) == {"narrative": "first\n\tindented with tab", "next": 1}
