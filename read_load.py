"""
read_load.py: async redirect load against ids produced by write_load.py or seed_urls.py.

Redirects are not followed; a 307 counts as a hit, 410 as a link deleted
meanwhile, anything else as a miss.

Usage:
  python read_load.py --base http://127.0.0.1:8080 --in ids_created.jsonl --count 15000 --concurrency 200
"""
import argparse
import asyncio
import json
import random
import statistics
import time
from collections import Counter

import httpx


def load_ids(path):
    with open(path, "r", encoding="utf-8") as f:
        rows = [json.loads(line) for line in f if line.strip()]
    return [row["id"] for row in rows if row.get("id")]


async def run(args, ids):
    codes = Counter()
    latencies_ms = []
    sem = asyncio.Semaphore(args.concurrency)
    limits = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)

    async with httpx.AsyncClient(base_url=args.base, limits=limits, timeout=args.timeout) as client:

        async def hit(id):
            async with sem:
                s = time.perf_counter()
                try:
                    r = await client.get(f"/{id}", follow_redirects=False)
                except httpx.HTTPError as e:
                    codes[type(e).__name__] += 1
                    return
                latencies_ms.append((time.perf_counter() - s) * 1000.0)
                codes[r.status_code] += 1

        t0 = time.perf_counter()
        await asyncio.gather(*(hit(random.choice(ids)) for _ in range(args.count)))
        elapsed = time.perf_counter() - t0

    hits = codes[307]
    print(f"read: {args.count} requests over {len(ids)} ids in {elapsed:.3f}s")
    print(f"  hits={hits} gone={codes[410]} other={args.count - hits - codes[410]}")
    print("  status: " + ", ".join(f"{k}={v}" for k, v in sorted(codes.items(), key=str)))
    if elapsed > 0:
        print(f"  RPS: {hits / elapsed:.1f} redirects/s")
    if len(latencies_ms) >= 2:
        q = statistics.quantiles(latencies_ms, n=100)
        print(f"  latency ms: p50={q[49]:.2f} p95={q[94]:.2f} max={max(latencies_ms):.2f}")


def main():
    parser = argparse.ArgumentParser(description="Resolve short links against a running server")
    parser.add_argument("--base", default="http://127.0.0.1:8080")
    parser.add_argument("--in", dest="ids_file", default="ids_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    parser.add_argument("--timeout", type=float, default=10.0)
    args = parser.parse_args()

    ids = load_ids(args.ids_file)
    if not ids:
        raise SystemExit(f"No ids found in {args.ids_file}. Run write_load.py or seed_urls.py first.")
    asyncio.run(run(args, ids))


if __name__ == "__main__":
    main()
