import pytest

from helpdex.navitem import NavigatorItem


def test_parent_in_constructor_appends_child():
    root = NavigatorItem("root")
    first = NavigatorItem("first", parent=root)
    second = NavigatorItem("second", parent=root)
    assert root.children == [first, second]
    assert first.parent is root
    assert second.parent is root


def test_add_child_reparents():
    a = NavigatorItem("a")
    b = NavigatorItem("b")
    child = NavigatorItem("child", parent=a)
    b.add_child(child)
    assert a.children == []
    assert b.children == [child]
    assert child.parent is b


def test_remove_detaches_subtree():
    root = NavigatorItem("root")
    sect = NavigatorItem("sect", parent=root)
    leaf = NavigatorItem("leaf", parent=sect)
    sect.remove()
    assert root.children == []
    assert sect.parent is None
    assert leaf.parent is sect


def test_remove_without_parent_keeps_item():
    item = NavigatorItem("alone")
    item.remove()
    assert item.parent is None
    assert [node.name for node in item.walk()] == ["alone"]


def test_walk_is_depth_first_preorder():
    root = NavigatorItem("root")
    a = NavigatorItem("a", parent=root)
    NavigatorItem("a1", parent=a)
    NavigatorItem("b", parent=root)
    assert [node.name for node in root.walk()] == ["root", "a", "a1", "b"]


def test_cycle_is_rejected():
    root = NavigatorItem("root")
    child = NavigatorItem("child", parent=root)
    with pytest.raises(ValueError):
        child.add_child(root)
    with pytest.raises(ValueError):
        root.add_child(root)


def test_defaults():
    item = NavigatorItem()
    assert (item.name, item.icon, item.url, item.hidden, item.expanded) == ("", "", "", False, False)