import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from app.utils.rotation import PromptRotation


def test_cycles_and_wraps():
    rot = PromptRotation(["a", "b", "c"])
    assert rot.current() == "a"
    assert [rot.advance() for _ in range(4)] == ["b", "c", "a", "b"]
    assert rot.index == 1
    assert list(rot) == ["b", "c", "a"]


def test_empty_rotation():
    rot = PromptRotation([])
    assert len(rot) == 0
    assert rot.current() is None
    assert rot.advance() is None
    assert list(rot) == []


def test_source_list_is_not_mutated():
    items = ["x", "y"]
    rot = PromptRotation(items, start=3)
    assert rot.current() == "y"
    items.append("z")
    assert len(rot) == 2
