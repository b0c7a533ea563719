import json

from memory.allocator import AddressSpace, Block
from run_sim import load_trace, replay


def alloc(obj, size):
    return {"event": "alloc", "id": obj, "size": size}


def free(obj, **extra):
    return dict({"event": "free", "id": obj}, **extra)


COALESCE = {"event": "coalesce"}

BASIC = [
    alloc("a", 300),
    alloc("b", 200),
    free("a"),
    COALESCE,
    alloc("c", 300),
    alloc("d", 300),
    free("b"),
    alloc("e", 500),
]


class TestLoadTrace:
    def test_skips_blank_lines(self, tmp_path):
        path = tmp_path / "t.jsonl"
        path.write_text(json.dumps(alloc("a", 1)) + "\n\n" + json.dumps(COALESCE) + "\n", encoding="utf-8")
        assert list(load_trace(str(path))) == [alloc("a", 1), COALESCE]


class TestReplay:
    def test_basic_trace(self):
        space = AddressSpace(800)
        addrs = {}
        stats = replay(BASIC, space, addrs=addrs)
        assert stats["alloc_events"] == 5
        assert stats["alloc_ok"] == 4
        assert stats["alloc_fail"] == 1
        assert stats["free_events"] == 2
        assert stats["coalesce"] == 1
        assert stats["invalid_release"] == 0
        assert addrs == {"c": 500, "d": 0}
        assert space.free_blocks == (Block(300, 200),)
        space.check_invariants()

    def test_retry_after_coalesce_rescues_allocation(self):
        events = [alloc("x", 50), alloc("y", 50), free("x"), free("y"), alloc("z", 100)]

        plain = replay(events, AddressSpace(100))
        assert plain["alloc_fail"] == 1
        assert plain["coalesce"] == 0

        addrs = {}
        retried = replay(events, AddressSpace(100), coalesce_on_fail=True, addrs=addrs)
        assert retried["alloc_fail"] == 0
        assert retried["rescued"] == 1
        assert retried["coalesce"] == 1
        assert addrs == {"z": 0}

    def test_retry_that_does_not_help_still_fails(self):
        stats = replay(BASIC, AddressSpace(800), coalesce_on_fail=True)
        assert stats["alloc_fail"] == 1
        assert stats["rescued"] == 0
        assert stats["coalesce"] == 2

    def test_free_by_address_on_empty_space(self):
        stats = replay([free("q", addr=0)], AddressSpace(10))
        assert stats["invalid_release"] == 1

    def test_free_of_unknown_id_is_counted_only(self):
        space = AddressSpace(10)
        stats = replay([alloc("a", 4), free("nope")], space)
        assert stats["free_events"] == 1
        assert space.allocated_blocks == (Block(0, 4),)

    def test_coalesce_with_nothing_free(self):
        stats = replay([alloc("a", 10), COALESCE], AddressSpace(10))
        assert stats["empty_coalesce"] == 1
        assert stats["coalesce"] == 0

    def test_second_alloc_of_live_id_is_skipped(self):
        space = AddressSpace(100)
        stats = replay([alloc("a", 10), alloc("a", 10), free("a"), free("a")], space)
        assert stats["alloc_ok"] == 1
        assert stats["dup_alloc"] == 1
        assert stats["free_events"] == 2
        assert space.allocated_blocks == ()
        space.check_invariants()

    def test_id_can_be_reused_after_free(self):
        addrs = {}
        stats = replay([alloc("a", 10), free("a"), alloc("a", 20)], AddressSpace(100), addrs=addrs)
        assert stats["alloc_ok"] == 2
        assert stats["dup_alloc"] == 0
        assert addrs == {"a": 10}

    def test_non_positive_size_counts_as_failure(self):
        space = AddressSpace(10)
        stats = replay([alloc("a", 0), alloc("b", -3)], space)
        assert stats["alloc_fail"] == 2
        assert stats["alloc_ok"] == 0
        assert space.free_blocks == (Block(0, 10),)
