from memory.allocator import AddressSpace
from viz.ascii_map import render_map


class TestRenderMap:
    def test_empty_space(self):
        assert render_map(AddressSpace(100), width=10) == "." * 10

    def test_half_allocated(self):
        space = AddressSpace(100)
        space.allocate(50)
        assert render_map(space, width=10) == "#####....."

    def test_tiny_block_still_shows(self):
        space = AddressSpace(1000)
        space.allocate(1)
        assert render_map(space, width=10) == "#........."

    def test_released_block_clears(self):
        space = AddressSpace(100)
        a = space.allocate(50)
        space.allocate(50)
        space.release(a)
        assert render_map(space, width=4) == "..##"

    def test_default_width(self):
        assert len(render_map(AddressSpace(10))) == 80
