import asyncio
from dataclasses import dataclass

from ordering.application.usecase.persisted_order_usecase import PersistedOrderList
from ordering.domain.ordered_list import next_sort_order, renumber, reorder, sort_items
from tests.fakes import ListOrderStore


@dataclass
class Item:
    id: str
    sort_order: int


def items(count=5):
    return [Item(id=f"i{index}", sort_order=index) for index in range(count)]


class TestOrderedList:
    def test_move_index_three_to_zero(self):
        result = reorder(items(), "i3", "i0")
        assert [item.id for item in result] == ["i3", "i0", "i1", "i2", "i4"]
        assert [item.sort_order for item in result] == [0, 1, 2, 3, 4]
        assert sorted(item.id for item in result) == [f"i{index}" for index in range(5)]

    def test_move_down(self):
        result = reorder(items(), "i0", "i3")
        assert [item.id for item in result] == ["i1", "i2", "i3", "i0", "i4"]

    def test_same_or_unknown_ids_are_no_ops(self):
        assert reorder(items(), "i1", "i1") is None
        assert reorder(items(), "i1", "zz") is None

    def test_input_is_not_mutated(self):
        original = items()
        reorder(original, "i4", "i0")
        assert [item.sort_order for item in original] == [0, 1, 2, 3, 4]

    def test_sort_is_stable(self):
        rows = [Item("b", 1), Item("a", 1), Item("c", 0)]
        assert [item.id for item in sort_items(rows)] == ["c", "b", "a"]

    def test_renumber_and_next(self):
        rows = renumber([Item("a", 7), Item("b", 3)])
        assert [item.sort_order for item in rows] == [0, 1]
        assert next_sort_order(rows) == 2
        assert next_sort_order([]) == 0


class TestPersistedOrderList:
    def test_successful_reorder_persists_every_position(self):
        store = ListOrderStore(items())
        order = PersistedOrderList(store=store)

        async def scenario():
            await order.load()
            return await order.reorder("i3", "i0")

        result = asyncio.run(scenario())
        assert result.changed and result.persisted and result.error is None
        assert [item.id for item in result.items] == ["i3", "i0", "i1", "i2", "i4"]
        assert {key: item.sort_order for key, item in store.items.items()} == {
            "i3": 0, "i0": 1, "i1": 2, "i2": 3, "i4": 4,
        }

    def test_failed_write_reloads_canonical_state(self):
        store = ListOrderStore(items(), fail_ids={"i2"})
        order = PersistedOrderList(store=store)

        async def scenario():
            await order.load()
            return await order.reorder("i3", "i0")

        result = asyncio.run(scenario())
        assert result.reloaded
        assert not result.persisted
        assert "i2" in result.error
        assert order.items == sorted(store.items.values(), key=lambda item: item.sort_order)

    def test_failed_reload_reverts_to_previous(self):
        store = ListOrderStore(items(), fail_ids={"i1"}, fail_reload=True)
        order = PersistedOrderList(store=store)

        async def scenario():
            await order.load()
            return await order.reorder("i4", "i0")

        result = asyncio.run(scenario())
        assert result.error is not None
        assert not result.reloaded
        assert [item.id for item in order.items] == ["i0", "i1", "i2", "i3", "i4"]

    def test_no_op_reorder_does_not_touch_store(self):
        store = ListOrderStore(items(), fail_ids={"i0", "i1", "i2", "i3", "i4"})
        order = PersistedOrderList(store=store)

        async def scenario():
            await order.load()
            return await order.reorder("i2", "i2")

        result = asyncio.run(scenario())
        assert not result.changed
        assert result.error is None
