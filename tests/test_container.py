import random

import pytest

from orderkeys import (
    EmptyContainer,
    InvalidArgument,
    InvalidBounds,
    NotFound,
    OrderKey,
    ReorderableContainer,
    from_keyed,
    reorderable_set_of,
)


class Item:
    def __init__(self, name, key=None):
        self.name = name
        self.key = key

    def __repr__(self):
        return f"Item({self.name!r})"


def get_key(item):
    # the container must have set the key before reading it
    assert item.key is not None
    return item.key


def set_key(item, key):
    assert key is not None
    item.key = key


def names(container):
    return [item.name for item in container]


def test_put_at_end_on_empty_container():
    container = ReorderableContainer()
    container.put_at_end("a", "b", "c")
    assert list(container) == ["a", "b", "c"]


def test_put_at_end_first():
    container = reorderable_set_of("a", "b")
    container.put_at_end("y", "z", last=False)
    assert list(container) == ["y", "z", "a", "b"]


def test_put_at_end_moves_present_elements():
    container = reorderable_set_of("a", "b", "c")
    container.put_at_end("a")
    assert list(container) == ["b", "c", "a"]
    container.put_at_end("a", last=False)
    assert list(container) == ["a", "b", "c"]


def test_put_at_end_with_every_element_moving():
    container = reorderable_set_of("a", "b", "c")
    container.put_at_end("c", "b", "a")
    assert list(container) == ["c", "b", "a"]


def test_put_between():
    container = reorderable_set_of("a", "b", "c")
    container.put_between("a", "b", "x")
    assert list(container) == ["a", "x", "b", "c"]
    container.put_between("x", "b", "y", "z")
    assert list(container) == ["a", "x", "y", "z", "b", "c"]


def test_put_between_across_an_occupied_gap():
    container = reorderable_set_of("a", "m", "b")
    container.put_between("a", "b", "x")
    assert list(container) == ["a", "x", "m", "b"]
    container.put_between("a", "b", *"pqrstuvw")
    keys = [key for _, key in container.items()]
    assert len(set(keys)) == len(keys)
    assert list(container) == ["a", *"pqrstuvw", "x", "m", "b"]


def test_put_between_moving_an_element_from_inside_the_gap():
    container = reorderable_set_of("a", "m", "n", "b")
    container.put_between("a", "b", "n")
    assert list(container) == ["a", "n", "m", "b"]
    keys = [key for _, key in container.items()]
    assert len(set(keys)) == len(keys)


def test_put_between_errors():
    container = reorderable_set_of("a", "b", "c")
    with pytest.raises(InvalidArgument):
        container.put_between("a", "a", "x")
    with pytest.raises(NotFound):
        container.put_between("a", "nope", "x")
    with pytest.raises(InvalidBounds):
        container.put_between("c", "a", "x")
    assert list(container) == ["a", "b", "c"]


def test_put_next_to():
    container = reorderable_set_of("a", "b", "c")
    container.put_next_to("a", "x")
    assert list(container) == ["a", "x", "b", "c"]
    container.put_next_to("a", "y", after=False)
    assert list(container) == ["y", "a", "x", "b", "c"]
    container.put_next_to("c", "z")
    assert list(container) == ["y", "a", "x", "b", "c", "z"]


def test_put_next_to_missing_anchor():
    container = reorderable_set_of("a")
    with pytest.raises(NotFound):
        container.put_next_to("b", "x")
    assert "x" not in container


def test_put_next_to_with_anchor_among_new_elements():
    container = reorderable_set_of("a", "b", "c", "d")
    container.put_next_to("b", "d", "b")
    assert list(container) == ["a", "d", "b", "c"]

    container = reorderable_set_of("a", "b", "c", "d")
    container.put_next_to("c", "c", "a", after=False)
    assert list(container) == ["b", "c", "a", "d"]


def test_put_next_to_lands_right_next_to_the_anchor():
    rng = random.Random(3)
    container = reorderable_set_of(*range(20))
    for new in range(100, 400):
        anchor = rng.choice(list(container))
        after = rng.random() < 0.7
        container.put_next_to(anchor, new, after=after)
        order = list(container)
        if after:
            assert order[order.index(anchor) + 1] == new
        else:
            assert order[order.index(anchor) - 1] == new
    assert len(container) == 320


def test_repeated_insertions_then_recompute():
    container = reorderable_set_of("first", "last")
    previous = "first"
    for i in range(60):
        container.put_next_to(previous, i)
        previous = i
    before = list(container)
    assert max(len(key) for _, key in container.items()) > 1

    container.recompute()

    assert list(container) == before
    assert max(len(key) for _, key in container.items()) == 1


def test_sort_by_is_stable():
    container = reorderable_set_of("bb", "a", "cc", "d")
    container.sort_by(len)
    assert list(container) == ["a", "d", "bb", "cc"]
    container.sort_by(len, reverse=True)
    assert list(container) == ["bb", "cc", "a", "d"]


def test_sort_with_comparator():
    container = reorderable_set_of(3, 1, 2)
    container.sort_with(lambda x, y: y - x)
    assert list(container) == [3, 2, 1]


def test_sort_natural_order():
    container = reorderable_set_of("c", "a", "b")
    container.sort()
    assert list(container) == ["a", "b", "c"]
    container.sort(reverse=True)
    assert list(container) == ["c", "b", "a"]


def test_sort_tranche_keeps_outside_keys():
    container = reorderable_set_of("e", "d", "c", "b", "a")
    outside = {e: container.key_of(e) for e in ("e", "a")}
    container.sort_tranche("e", "a")
    assert list(container) == ["e", "b", "c", "d", "a"]
    assert {e: container.key_of(e) for e in ("e", "a")} == outside


def test_sort_tranche_open_ends():
    container = reorderable_set_of("e", "d", "c", "b", "a")
    kept = {e: container.key_of(e) for e in ("c", "b", "a")}
    container.sort_tranche(None, "c")
    assert list(container) == ["d", "e", "c", "b", "a"]
    assert {e: container.key_of(e) for e in ("c", "b", "a")} == kept

    container.sort_tranche("c")
    assert list(container) == ["d", "e", "c", "a", "b"]

    container.sort_tranche()
    assert list(container) == ["a", "b", "c", "d", "e"]


def test_sort_tranche_by_and_with():
    container = reorderable_set_of("x", "ccc", "a", "bb", "y")
    container.sort_tranche_by("x", "y", len)
    assert list(container) == ["x", "a", "bb", "ccc", "y"]
    container.sort_tranche_with("x", "y", lambda p, q: len(q) - len(p))
    assert list(container) == ["x", "ccc", "bb", "a", "y"]


def test_sort_tranche_empty_or_reversed_bounds():
    container = reorderable_set_of("a", "b", "c")
    keys = dict(container.items())
    container.sort_tranche("c", "a")
    container.sort_tranche("a", "b")
    assert dict(container.items()) == keys
    with pytest.raises(NotFound):
        container.sort_tranche("a", "nope")


def test_pop_item():
    container = reorderable_set_of("a", "b", "c")
    assert container.pop_item() == "c"
    assert container.pop_item(last=False) == "a"
    assert list(container) == ["b"]


def test_pop_item_on_empty_container():
    with pytest.raises(EmptyContainer):
        ReorderableContainer().pop_item()


def test_pop_items():
    container = reorderable_set_of("a", "b", "c", "d")
    popped = container.pop_items(2, last=True)
    assert set(popped) == {"c", "d"}
    assert list(container) == ["a", "b"]


def test_pop_items_extraction_order():
    container = reorderable_set_of("a", "b", "c", "d")
    assert container.pop_items(2) == ["d", "c"]
    assert container.pop_items(1, last=False) == ["a"]


def test_pop_items_underfilled():
    container = reorderable_set_of("a", "b")
    assert set(container.pop_items(5)) == {"a", "b"}
    assert len(container) == 0
    assert container.pop_items(3) == []
    with pytest.raises(InvalidArgument):
        container.pop_items(-1)


def test_remove_and_discard():
    container = reorderable_set_of("a", "b", "c")
    with pytest.raises(NotFound):
        container.remove("z")
    container.discard("z")
    assert list(container) == ["a", "b", "c"]

    container.remove("b")
    assert list(container) == ["a", "c"]


def test_remove_is_all_or_nothing():
    container = reorderable_set_of("a", "b", "c")
    with pytest.raises(NotFound):
        container.remove("a", "z")
    assert list(container) == ["a", "b", "c"]


def test_collection_protocol():
    container = ReorderableContainer(["b", "a", "b", "c"])
    assert len(container) == 3
    assert "a" in container
    assert "z" not in container
    assert list(container) == ["b", "a", "c"]
    assert list(reversed(container)) == ["c", "a", "b"]
    assert set(container.elements()) == {"a", "b", "c"}
    assert repr(container) == "ReorderableContainer(['b', 'a', 'c'])"


def test_iteration_is_restartable():
    container = reorderable_set_of("a", "b")
    iterator = iter(container)
    assert list(iterator) == ["a", "b"]
    assert list(iterator) == []
    assert list(container) == ["a", "b"]


def test_keys_are_exposed_in_order():
    container = reorderable_set_of("a", "b", "c")
    items = list(container.items())
    assert [e for e, _ in items] == ["a", "b", "c"]
    assert [k for _, k in items] == sorted(k for _, k in items)
    assert container.sort_key("b") == items[1][1]
    assert sorted(["c", "a", "b"], key=container.sort_key) == ["a", "b", "c"]
    with pytest.raises(NotFound):
        container.key_of("z")


def test_initial_storage_must_be_empty():
    storage = reorderable_set_of(Item("a"), get_key=get_key, set_key=set_key)._storage
    with pytest.raises(InvalidArgument):
        ReorderableContainer([Item("b")], storage=storage)


# === accessor storage ===


def test_accessor_storage_writes_keys_on_elements():
    items = [Item("a"), Item("b"), Item("c")]
    container = reorderable_set_of(*items, get_key=get_key, set_key=set_key)
    assert names(container) == ["a", "b", "c"]
    assert items[0].key < items[1].key < items[2].key

    x = Item("x")
    container.put_between(items[0], items[1], x)
    assert names(container) == ["a", "x", "b", "c"]
    assert items[0].key < x.key < items[1].key

    container.put_at_end(Item("z"))
    container.put_next_to(items[2], Item("y"), after=False)
    assert names(container) == ["a", "x", "b", "y", "c", "z"]


def test_accessor_storage_reorders_and_removes():
    items = [Item(name) for name in "dbca"]
    container = reorderable_set_of(*items, get_key=get_key, set_key=set_key)
    container.sort_by(lambda item: item.name)
    assert names(container) == ["a", "b", "c", "d"]

    popped = container.pop_item()
    assert popped.name == "d"
    container.remove(items[1])
    container.discard(items[1])
    assert names(container) == ["a", "c"]


def test_accessor_pair_must_be_complete():
    with pytest.raises(InvalidArgument):
        reorderable_set_of("a", get_key=get_key)


def test_from_keyed_keeps_existing_keys():
    items = [Item("b", OrderKey([200])), Item("a", OrderKey([3])), Item("c", OrderKey([250, 1]))]
    container = from_keyed(items, get_key, set_key)
    assert names(container) == ["a", "b", "c"]
    assert items[0].key == OrderKey([200])

    container.put_next_to(items[1], Item("x"))
    assert names(container) == ["a", "x", "b", "c"]
    assert items[1].key == OrderKey([3])


def test_from_keyed_rejects_shared_keys():
    items = [Item("a", OrderKey([3])), Item("b", OrderKey([3]))]
    with pytest.raises(InvalidArgument):
        from_keyed(items, get_key, set_key)


def test_from_keyed_rejects_missing_keys():
    items = [Item("a", OrderKey([3])), Item("b")]
    with pytest.raises(InvalidArgument):
        from_keyed(items, lambda item: item.key, set_key)
