"""
write_load.py — async load script that creates short links

Usage:
  python write_load.py --base http://127.0.0.1:8080 --key change-me --count 2000 --concurrency 100 --out links_created.jsonl
"""
import argparse
import asyncio
import json
import random
import string
import time
from datetime import datetime, timezone

import httpx

def _now_iso():
    return datetime.now(timezone.utc).isoformat()

def _rand_target(idx: int) -> str:
    hosts = ["example.com", "example.org", "example.net", "demo.io"]
    path = "".join(random.choice(string.ascii_letters + string.digits) for _ in range(8))
    return f"https://{random.choice(hosts)}/{path}?q={idx}"

async def _create_one(client: httpx.AsyncClient, base: str, key: str, ttl: int, out_file, idx: int):
    target = _rand_target(idx)
    form = {"key": key, "link": target}
    if ttl > 0:
        form["validity"] = str(int(time.time()) + ttl)
    try:
        r = await client.post(f"{base}/", data=form, timeout=10)
        r.raise_for_status()
        token = r.json().get("content")
        if token and out_file:
            out_file.write(json.dumps({"token": token, "link": target}) + "\n")
        return True
    except httpx.HTTPError:
        return False

async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8080")
    parser.add_argument("--key", required=True, help="creation key from the KEYS allow-list")
    parser.add_argument("--count", type=int, default=2000)
    parser.add_argument("--concurrency", type=int, default=100)
    parser.add_argument("--ttl", type=int, default=0, help="seconds until expiry; 0 = never")
    parser.add_argument("--out", default="links_created.jsonl")
    args = parser.parse_args()

    start_iso = _now_iso()
    t0 = time.perf_counter()
    success = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    with open(args.out, "w", encoding="utf-8") as out_f:
        async with httpx.AsyncClient(limits=limit) as client:
            sem = asyncio.Semaphore(args.concurrency)

            async def _task(i):
                nonlocal success
                async with sem:
                    if await _create_one(client, args.base, args.key, args.ttl, out_f, i):
                        success += 1

            await asyncio.gather(*(_task(i) for i in range(args.count)))

    dt = time.perf_counter() - t0
    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   writes={args.count}, ok={success}, fail={args.count - success}")
    if dt > 0:
        print(f"TPS:   {success/dt:.1f} req/s")

if __name__ == "__main__":
    asyncio.run(main())
