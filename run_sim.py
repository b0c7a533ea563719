from __future__ import annotations
import argparse, json, logging
from typing import Dict, Iterable
from memory.allocator import AddressSpace, ALLOC_FAILED, InvalidRelease, EmptyFreeList
from memory.fragmentation import compute_metrics
from viz.ascii_map import render_map

log = logging.getLogger(__name__)

def load_trace(path: str):
    with open(path,'r',encoding='utf-8') as f:
        for line in f:
            line=line.strip()
            if line:
                yield json.loads(line)

def new_stats() -> Dict[str,int]:
    return {
        'alloc_events':0,'alloc_ok':0,'alloc_fail':0,'rescued':0,'dup_alloc':0,
        'free_events':0,'invalid_release':0,
        'coalesce':0,'empty_coalesce':0,
    }

def replay(events: Iterable[dict], space: AddressSpace, coalesce_on_fail: bool=False,
           addrs: Dict[str,int] | None=None) -> Dict[str,int]:
    """Drive `space` with trace events and return counters.

    `addrs` maps trace ids to the base address they were given; it is filled
    in as allocations succeed and emptied as they are released.
    """
    stats=new_stats()
    if addrs is None:
        addrs={}

    def coalesce() -> bool:
        try:
            space.coalesce()
        except EmptyFreeList:
            stats['empty_coalesce'] += 1
            return False
        stats['coalesce'] += 1
        return True

    for ev in events:
        et=ev['event']

        if et=='alloc':
            obj=str(ev['id']); size=int(ev['size'])
            stats['alloc_events'] += 1
            if obj in addrs:
                stats['dup_alloc'] += 1
                log.info("alloc %s: id already holds address %d", obj, addrs[obj])
                continue
            if size < 1:
                stats['alloc_fail'] += 1
                log.info("alloc %s: bad size %d", obj, size)
                continue
            addr=space.allocate(size)
            if addr==ALLOC_FAILED and coalesce_on_fail and coalesce():
                addr=space.allocate(size)
                if addr!=ALLOC_FAILED:
                    stats['rescued'] += 1
            if addr==ALLOC_FAILED:
                stats['alloc_fail'] += 1
                log.info("alloc %s size=%d failed", obj, size)
            else:
                stats['alloc_ok'] += 1
                addrs[obj]=addr
            continue

        if et=='free':
            obj=str(ev.get('id', ''))
            addr=addrs.pop(obj, ev.get('addr'))
            stats['free_events'] += 1
            if addr is None:
                log.info("free %s: id was never allocated", obj)
                continue
            try:
                space.release(int(addr))
            except InvalidRelease as e:
                stats['invalid_release'] += 1
                log.info("free %s: %s", obj, e)
            continue

        if et=='coalesce':
            coalesce()
            continue

        log.warning("unknown event type %r", et)

    return stats

def main():
    ap=argparse.ArgumentParser()
    ap.add_argument('--trace', required=True)
    ap.add_argument('--capacity', type=int, default=800)
    ap.add_argument('--coalesce-on-fail', action='store_true',
                    help="On allocation failure, call coalesce() once and retry. "
                         "The manager itself never coalesces implicitly.")
    ap.add_argument('--show-map', action='store_true')
    ap.add_argument('--show-lists', action='store_true',
                    help="Print the raw free/allocated listing at the end.")
    ap.add_argument('--width', type=int, default=80)
    ap.add_argument('--log-level', default='WARNING',
                    choices=['DEBUG','INFO','WARNING','ERROR'])
    args=ap.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(levelname)s %(name)s: %(message)s')

    space=AddressSpace(args.capacity)
    stats=replay(load_trace(args.trace), space, coalesce_on_fail=args.coalesce_on_fail)
    space.check_invariants()

    m=compute_metrics(space.extents_free())
    print("="*72)
    print("Address Space Manager — Simulator Summary")
    print("="*72)
    print(f"Capacity: {space.capacity}  Used: {space.used()}  Free: {space.free_bytes()}  Coalesce-on-fail: {args.coalesce_on_fail}")
    print(f"Allocs: {stats['alloc_events']}  ok={stats['alloc_ok']} fail={stats['alloc_fail']} rescued={stats['rescued']} dup={stats['dup_alloc']}")
    print(f"Frees: {stats['free_events']}  Invalid releases: {stats['invalid_release']}")
    print(f"Coalesce calls: {stats['coalesce']}  empty={stats['empty_coalesce']}")
    print("-"*72)
    print(f"Fragmentation: LFE={m.lfe} holes={m.hole_count} adjacent={m.adjacent_pairs} "
          f"external_frag={m.external_frag:.3f} entropy={m.entropy:.3f}")
    if args.show_map:
        print("-"*72)
        print("Memory map (ASCII):")
        print(render_map(space, args.width))
    if args.show_lists:
        print("-"*72)
        print(space)
    print("="*72)

if __name__=='__main__':
    main()
