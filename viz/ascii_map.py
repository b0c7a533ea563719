from __future__ import annotations
from memory.allocator import AddressSpace

def render_map(space: AddressSpace, width: int=80) -> str:
    cap=space.capacity
    buf=['.']*width
    for b in space.allocated_blocks:
        s=int((b.base/cap)*width)
        e=int((b.end/cap)*width)
        for i in range(max(0,s), min(width, max(s+1,e))):
            buf[i]='#'
    return ''.join(buf)
