from form_layout_toolkit.core.models import Row
from form_layout_toolkit.core.normalize import normalize_rows
from layout_factory import field, find, form, has_empty_rows, row_ids, section, tab


def test_removes_empty_rows_at_every_depth():
    inner = section("s2", [], [field("f2")], [])
    root = form(tab("t1", [section("s1", [field("f1")], [], [inner])], []))
    assert has_empty_rows(root)

    result = normalize_rows(root)

    assert not has_empty_rows(result)
    assert row_ids(find(result, "t1")) == [["s1"]]
    assert row_ids(find(result, "s1")) == [["f1"], ["s2"]]
    assert row_ids(find(result, "s2")) == [["f2"]]


def test_returns_same_root_when_nothing_is_empty(sample_form):
    assert normalize_rows(sample_form) is sample_form


def test_container_without_rows_is_valid():
    root = form(tab("t1", [section("s1")]))
    assert normalize_rows(root) is root
    assert find(root, "s1").rows == ()


def test_shares_subtrees_without_empty_rows():
    clean = tab("t2", [section("s9", [field("f9")])])
    root = form(tab("t1", [section("s1", [field("f1")], [])]), clean)
    result = normalize_rows(root)
    assert result.tabs[1] is clean


def test_row_len():
    assert len(Row(contents=(field("a"), field("b")))) == 2
    assert len(Row()) == 0
