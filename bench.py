from __future__ import annotations
import subprocess
import sys
import re
from pathlib import Path

PY = sys.executable  # respects venv if activated, otherwise uses current python

SCENARIOS = [
    ("fragmentation_stressor.jsonl", False),
    ("fragmentation_stressor.jsonl", True),
    ("basic.jsonl", False),
    ("basic.jsonl", True),
]

TRACES = Path("traces")

PATTERNS = {
    "alloc_ok": re.compile(r"ok=(\d+)"),
    "alloc_fail": re.compile(r"fail=(\d+)"),
    "rescued": re.compile(r"rescued=(\d+)"),
    "coalesce": re.compile(r"Coalesce calls:\s+(\d+)"),
    "used": re.compile(r"Used:\s+(\d+)"),
    "lfe": re.compile(r"Fragmentation: LFE=(\d+)"),
    "holes": re.compile(r"holes=(\d+)"),
    "adjacent": re.compile(r"adjacent=(\d+)"),
    "external_frag": re.compile(r"external_frag=([0-9\.]+)"),
}

def run(trace: str, coalesce_on_fail: bool) -> str:
    cmd = [PY, "run_sim.py", "--trace", str(TRACES / trace)]
    if coalesce_on_fail:
        cmd.append("--coalesce-on-fail")
    out = subprocess.check_output(cmd, stderr=subprocess.STDOUT, text=True)
    return out

def parse(out: str):
    def get(key, default=None):
        m = PATTERNS[key].search(out)
        return m.group(1) if m else default
    return {
        "alloc_ok": int(get("alloc_ok", 0)),
        "alloc_fail": int(get("alloc_fail", 0)),
        "rescued": int(get("rescued", 0)),
        "coalesce": int(get("coalesce", 0)),
        "used": int(get("used", 0)),
        "lfe": int(get("lfe", 0)),
        "holes": int(get("holes", 0)),
        "adjacent": int(get("adjacent", 0)),
        "external_frag": float(get("external_frag", 0.0)),
    }

def main():
    rows=[]
    for trace, cof in SCENARIOS:
        out = run(trace, cof)
        rows.append((trace, cof, parse(out)))

    header = ["trace","retry","ok","fail","rescued","coalesce","used","LFE","holes","adj","ext_frag"]
    print("="*112)
    print("Address Space Manager — Benchmark Table")
    print("="*112)
    print("{:<30} {:<6} {:>5} {:>5} {:>8} {:>9} {:>6} {:>6} {:>6} {:>5} {:>9}".format(*header))
    for trace, cof, m in rows:
        print("{:<30} {:<6} {:>5} {:>5} {:>8} {:>9} {:>6} {:>6} {:>6} {:>5} {:>9.3f}".format(
            trace, "yes" if cof else "no", m["alloc_ok"], m["alloc_fail"], m["rescued"], m["coalesce"],
            m["used"], m["lfe"], m["holes"], m["adjacent"], m["external_frag"]
        ))
    print("="*112)
    print("Tip: run a trace with --show-map --show-lists to see the free and allocated lists.")
    print("  python run_sim.py --trace traces/fragmentation_stressor.jsonl --coalesce-on-fail --show-map --show-lists")

if __name__ == "__main__":
    main()
