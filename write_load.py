"""
write_load.py: async load generator for the shortening endpoints.

Every worker shares one cookie jar, so all links land under a single
anonymous owner (handy for exercising GET/DELETE /api/user/urls afterwards).

Usage:
  python write_load.py --base http://127.0.0.1:8080 --count 2000 --concurrency 100
  python write_load.py --batch-size 50 --gzip --out ids_created.jsonl
"""
import argparse
import asyncio
import gzip
import json
import statistics
import time
import uuid
from collections import Counter

import httpx


def _urls(count):
    run = uuid.uuid4().hex[:8]
    return [f"https://load-{run}.example/{i}" for i in range(count)]


def _chunks(items, size):
    for i in range(0, len(items), size):
        yield items[i:i + size]


class Stats:
    def __init__(self):
        self.codes = Counter()
        self.latencies_ms = []
        self.created = []

    def report(self, label, elapsed):
        done = sum(self.codes.values())
        print(f"{label}: {done} requests in {elapsed:.3f}s ({done / elapsed:.1f} req/s)")
        print("  status: " + ", ".join(f"{k}={v}" for k, v in sorted(self.codes.items())))
        if len(self.latencies_ms) >= 2:
            q = statistics.quantiles(self.latencies_ms, n=100)
            print(f"  latency ms: p50={q[49]:.2f} p95={q[94]:.2f} max={max(self.latencies_ms):.2f}")
        print(f"  links recorded: {len(self.created)}")


async def _post(client, path, payload, use_gzip, stats):
    body = json.dumps(payload).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if use_gzip:
        body = gzip.compress(body)
        headers["Content-Encoding"] = "gzip"
    s = time.perf_counter()
    try:
        r = await client.post(path, content=body, headers=headers)
    except httpx.HTTPError as e:
        stats.codes[type(e).__name__] += 1
        return None
    stats.latencies_ms.append((time.perf_counter() - s) * 1000.0)
    stats.codes[r.status_code] += 1
    return r


async def _shorten_one(client, url, args, stats):
    r = await _post(client, "/api/shorten", {"url": url}, args.gzip, stats)
    # a 409 still carries the existing short URL
    if r is not None and r.status_code in (201, 409):
        stats.created.append((r.json()["result"].rsplit("/", 1)[-1], url))


async def _shorten_batch(client, urls, args, stats):
    payload = [{"correlation_id": str(i), "original_url": u} for i, u in enumerate(urls)]
    r = await _post(client, "/api/shorten/batch", payload, args.gzip, stats)
    if r is not None and r.status_code == 201:
        for item in r.json():
            stats.created.append((item["short_url"].rsplit("/", 1)[-1], urls[int(item["correlation_id"])]))


async def run(args):
    urls = _urls(args.count)
    stats = Stats()
    sem = asyncio.Semaphore(args.concurrency)
    limits = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)

    async with httpx.AsyncClient(base_url=args.base, limits=limits, timeout=args.timeout) as client:
        # one request up front to obtain the auth cookie everyone reuses
        await client.get("/ping")

        async def guarded(coro):
            async with sem:
                await coro

        if args.batch_size > 1:
            jobs = [_shorten_batch(client, chunk, args, stats) for chunk in _chunks(urls, args.batch_size)]
        else:
            jobs = [_shorten_one(client, u, args, stats) for u in urls]

        t0 = time.perf_counter()
        await asyncio.gather(*(guarded(j) for j in jobs))
        elapsed = time.perf_counter() - t0

    with open(args.out, "w", encoding="utf-8") as out_f:
        for id, url in stats.created:
            out_f.write(json.dumps({"id": id, "url": url}) + "\n")

    stats.report("write", elapsed)


def main():
    parser = argparse.ArgumentParser(description="Create short links against a running server")
    parser.add_argument("--base", default="http://127.0.0.1:8080")
    parser.add_argument("--count", type=int, default=2000, help="distinct URLs to shorten")
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--batch-size", type=int, default=1, help=">1 uses /api/shorten/batch")
    parser.add_argument("--gzip", action="store_true", help="send gzip-compressed request bodies")
    parser.add_argument("--timeout", type=float, default=10.0)
    parser.add_argument("--out", default="ids_created.jsonl")
    asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    main()
