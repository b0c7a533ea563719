"""
Address Space Manager — Visualizer

Generates a simple Matplotlib heatmap showing address-space occupancy over
trace time. Explicit coalesce events are marked as horizontal lines.

How to run (recommended, from repo root):
    python -m tools.visualize_fragmentation --trace traces/fragmentation_stressor.jsonl --out out_fragmentation.png

Notes:
- Events are replayed one at a time through run_sim.replay so the picture
  matches what the simulator reports.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script:
# (python -m tools.visualize_fragmentation already works without this,
#  but this makes `python tools/visualize_fragmentation.py ...` work too.)
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import matplotlib.pyplot as plt

from memory.allocator import AddressSpace
from memory.fragmentation import compute_metrics
from run_sim import load_trace, replay


def render_state(space: AddressSpace, width: int) -> np.ndarray:
    """
    Return a 1D occupancy array over the address space, binned to 'width'.
    1.0 marks a bin touched by an allocated block.
    """
    cap = space.capacity
    bins = np.zeros(width, dtype=np.float32)
    scale = cap / width

    for blk in space.allocated_blocks:
        a = int(blk.base / scale)
        b = int((blk.end - 1) / scale)
        a = max(0, min(width - 1, a))
        b = max(0, min(width - 1, b))
        bins[a : b + 1] = 1.0

    return bins


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--trace", required=True, help="Path to JSONL trace")
    ap.add_argument("--out", default="out_fragmentation.png", help="Output image file")
    ap.add_argument("--capacity", type=int, default=800, help="Address space capacity")
    ap.add_argument("--width", type=int, default=140, help="Heatmap width (bins)")
    ap.add_argument("--every", type=int, default=1, help="Record every N events")
    args = ap.parse_args()

    trace_path = Path(args.trace)
    if not trace_path.exists():
        raise SystemExit(f"Trace not found: {trace_path}")

    space = AddressSpace(args.capacity)
    addrs: dict[str, int] = {}

    frames: list[np.ndarray] = []
    coalesce_marks: list[int] = []

    for i, ev in enumerate(load_trace(str(trace_path)), start=1):
        replay([ev], space, addrs=addrs)
        if ev.get("event") == "coalesce":
            coalesce_marks.append(len(frames))

        if args.every <= 1 or (i % args.every == 0):
            frames.append(render_state(space, args.width))

    if not frames:
        raise SystemExit("No frames captured. Check trace path and --every.")

    H = np.stack(frames, axis=0)  # (time, width)

    fig = plt.figure(figsize=(10.5, 4.6))
    ax = fig.add_subplot(111)
    ax.imshow(H, aspect="auto", interpolation="nearest")
    ax.set_title("Address Space Occupancy Heatmap (Trace-driven)")
    ax.set_xlabel("address (binned)")
    ax.set_ylabel("time (frames)")

    for t in coalesce_marks:
        ax.axhline(t, linewidth=1)

    m = compute_metrics(space.extents_free())
    caption = (
        f"Final fragmentation: LFE={m.lfe}, holes={m.hole_count}, adjacent={m.adjacent_pairs}, "
        f"external_frag={m.external_frag:.3f}, entropy={m.entropy:.3f}"
    )
    fig.text(0.01, 0.01, caption, fontsize=9)

    fig.tight_layout()
    out_path = Path(args.out)
    fig.savefig(str(out_path), dpi=220)
    print(f"Wrote: {out_path.resolve()}")


if __name__ == "__main__":
    main()
