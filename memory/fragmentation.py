from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple
import math

@dataclass
class FragMetrics:
    total_free: int
    lfe: int
    external_frag: float
    entropy: float
    hole_count: int
    adjacent_pairs: int

def _entropy(sizes: List[int]) -> float:
    total = sum(sizes)
    if total <= 0:
        return 0.0
    ps = [s/total for s in sizes if s>0]
    return -sum(p*math.log(p, 2) for p in ps)

def _adjacent_pairs(free_extents: List[Tuple[int,int]]) -> int:
    # counted in address order, regardless of list order
    ext = sorted(free_extents)
    return sum(1 for (b0, s0), (b1, _) in zip(ext, ext[1:]) if b0 + s0 == b1)

def compute_metrics(free_extents: List[Tuple[int,int]]) -> FragMetrics:
    extents = [(b, s) for b, s in free_extents if s > 0]
    sizes = [s for _, s in extents]
    total_free = sum(sizes)
    lfe = max(sizes, default=0)
    external = 0.0 if total_free == 0 else 1.0 - (lfe/total_free)
    return FragMetrics(total_free, lfe, external, _entropy(sizes), len(sizes), _adjacent_pairs(extents))
