import pytest

from dependable.chain import ResolverChain
from dependable.errors import ChainFrozenError
from dependable.search_modules import MISSING, LookupResult, MappingModule


class RecordingModule:
    def __init__(self, values):
        self.values = values
        self.requested = []

    def try_get(self, name):
        self.requested.append(name)
        if name in self.values:
            return LookupResult(self.values[name], True)
        return MISSING


@pytest.fixture
def chain():
    return ResolverChain()


def test_empty_chain_reports_miss(chain):
    assert chain.lookup("logger") is MISSING


def test_earlier_modules_shadow_later_ones(chain):
    chain.add({"greeting": "hello"}, {"greeting": "hi", "name": "world"})

    assert chain.lookup("greeting") == LookupResult("hello", True)
    assert chain.lookup("name") == LookupResult("world", True)


def test_add_preserves_call_order(chain):
    first = MappingModule({})
    second = MappingModule({})
    third = MappingModule({})

    chain.add(first, second)
    chain.add(third)

    assert chain.modules == (first, second, third)
    assert list(chain) == [first, second, third]
    assert len(chain) == 3


def test_lookup_stops_at_first_match(chain):
    first = RecordingModule({"logger": "L"})
    second = RecordingModule({"logger": "L2"})
    chain.add(first, second)

    chain.lookup("logger")

    assert first.requested == ["logger"]
    assert second.requested == []


def test_found_none_is_not_a_miss(chain):
    chain.add({"logger": None}, {"logger": "L"})

    assert chain.lookup("logger") == LookupResult(None, True)


def test_parent_chain_is_searched_last():
    parent = ResolverChain()
    parent.add({"logger": "parent", "cache": "parent-cache"})
    child = ResolverChain(parent)
    child.add({"logger": "child"})

    assert child.lookup("logger").value == "child"
    assert child.lookup("cache").value == "parent-cache"
    assert child.lookup("missing") is MISSING


def test_first_lookup_freezes_chain(chain):
    chain.add({"a": 1})
    assert not chain.frozen

    chain.lookup("a")

    assert chain.frozen
    with pytest.raises(ChainFrozenError, match="after it has been used"):
        chain.add({"b": 2})
    assert chain.lookup("b") is MISSING


def test_freezing_child_freezes_parent():
    parent = ResolverChain()
    child = ResolverChain(parent)

    child.freeze()

    assert parent.frozen
    with pytest.raises(ChainFrozenError):
        parent.add({"a": 1})


def test_contains_uses_membership_when_available(chain):
    values = RecordingModule({"logger": "L"})
    chain.add(MappingModule({"cache": "C"}), values)

    assert chain.contains("cache")
    assert chain.contains("logger")
    assert not chain.contains("mailer")
    assert values.requested == ["logger", "mailer"]


def test_contains_searches_parent():
    parent = ResolverChain()
    parent.add({"logger": "L"})
    child = ResolverChain(parent)

    assert child.contains("logger")
    assert not child.contains("cache")
    assert child.frozen and parent.frozen
