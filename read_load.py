"""
read_load.py — async load script that resolves short tokens

Usage:
  python read_load.py --base http://127.0.0.1:8080 --in links_created.jsonl --count 15000 --concurrency 200
"""
import argparse
import asyncio
import json
import random
import time
from collections import Counter
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _load_tokens(path):
    tokens = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                token = json.loads(line).get("token")
            except json.JSONDecodeError:
                continue
            if token:
                tokens.append(token)
    return tokens

async def _hit_one(client: httpx.AsyncClient, base: str, token: str):
    try:
        r = await client.get(f"{base}/{token}", follow_redirects=False, timeout=10)
        return r.status_code
    except httpx.HTTPError:
        return None

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8080")
    parser.add_argument("--in", dest="tokens_file", default="links_created.jsonl")
    parser.add_argument("--count", type=int, default=15000)
    parser.add_argument("--concurrency", type=int, default=200)
    args = parser.parse_args()

    tokens = _load_tokens(args.tokens_file)
    if not tokens:
        print(f"No tokens found in {args.tokens_file}. Run write_load.py first.")
        return

    start_iso = _now_iso()
    t0 = time.perf_counter()
    statuses = Counter()

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            async with sem:
                statuses[await _hit_one(client, args.base, random.choice(tokens))] += 1

        await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    redirects = statuses.get(302, 0)
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   reads={args.count}, 302={redirects}, 404={statuses.get(404, 0)}, "
          f"other={args.count - redirects - statuses.get(404, 0)}")
    if dt > 0:
        print(f"RPS:   {args.count/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
