#!/usr/bin/env python3
"""
Load Testing Script for the Circle Enclosure API

Sends concurrent /v1/enclosure requests with random centers, radii and
resolutions and reports latency percentiles and error counts.

Usage:
    uvicorn src.enclosure.main:app
    python scripts/load_test.py --requests 500 --concurrent 20
"""
import argparse
import asyncio
import random
import statistics
import time
from typing import Any, Dict, List

import httpx

# Downtown Phoenix, with centers scattered within ~5km
CENTER = (33.4484, -112.0740)
CENTER_JITTER = 0.05

# (resolution, min radius m, max radius m): keeps results in the tens to hundreds of cells
WORKLOADS = [
    (7, 1000, 10000),
    (8, 300, 3000),
    (9, 100, 1000),
    (10, 50, 400),
]


def generate_query() -> Dict[str, Any]:
    """Random enclosure query around the test center."""
    resolution, min_radius, max_radius = random.choice(WORKLOADS)
    return {
        "lat": CENTER[0] + random.uniform(-CENTER_JITTER, CENTER_JITTER),
        "lon": CENTER[1] + random.uniform(-CENTER_JITTER, CENTER_JITTER),
        "radius_m": round(random.uniform(min_radius, max_radius), 1),
        "resolution": resolution,
    }


async def send_query(client: httpx.AsyncClient, base_url: str, params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Send a single enclosure request and measure response time.

    Returns:
        dict with status, duration and cell count
    """
    start_time = time.perf_counter()
    try:
        response = await client.get(f"{base_url}/v1/enclosure", params=params, timeout=30.0)
        duration = time.perf_counter() - start_time
        data = response.json()
        return {
            "success": response.status_code == 200,
            "status_code": response.status_code,
            "duration": duration,
            "cells": data.get("total_cells") if response.status_code == 200 else None,
            "error": None if response.status_code == 200 else data.get("error"),
        }
    except httpx.HTTPError as e:
        return {
            "success": False,
            "status_code": None,
            "duration": time.perf_counter() - start_time,
            "cells": None,
            "error": type(e).__name__,
        }


async def run_load_test(base_url: str, num_requests: int, concurrent_limit: int) -> List[Dict[str, Any]]:
    """Run num_requests queries with at most concurrent_limit in flight."""
    semaphore = asyncio.Semaphore(concurrent_limit)

    async with httpx.AsyncClient() as client:
        async def bounded(params):
            async with semaphore:
                return await send_query(client, base_url, params)

        tasks = [bounded(generate_query()) for _ in range(num_requests)]
        return await asyncio.gather(*tasks)


def percentile(values: List[float], pct: float) -> float:
    ordered = sorted(values)
    index = min(len(ordered) - 1, int(round(pct / 100 * (len(ordered) - 1))))
    return ordered[index]


def display_results(results: List[Dict[str, Any]], elapsed: float) -> None:
    successes = [r for r in results if r["success"]]
    failures = [r for r in results if not r["success"]]
    durations = [r["duration"] * 1000 for r in successes]

    print("\n" + "=" * 60)
    print("LOAD TEST RESULTS")
    print("=" * 60)
    print(f"  Requests:     {len(results)}")
    print(f"  Successful:   {len(successes)}")
    print(f"  Failed:       {len(failures)}")
    print(f"  Throughput:   {len(results) / elapsed:.1f} req/s")

    if durations:
        cells = [r["cells"] for r in successes]
        print()
        print("  Latency (ms):")
        print(f"    mean:  {statistics.mean(durations):.1f}")
        print(f"    p50:   {percentile(durations, 50):.1f}")
        print(f"    p95:   {percentile(durations, 95):.1f}")
        print(f"    p99:   {percentile(durations, 99):.1f}")
        print(f"    max:   {max(durations):.1f}")
        print()
        print(f"  Cells per result: mean {statistics.mean(cells):.1f}, max {max(cells)}")

    if failures:
        print()
        print("  Errors:")
        counts = {}
        for r in failures:
            key = r["error"] or f"HTTP {r['status_code']}"
            counts[key] = counts.get(key, 0) + 1
        for key, count in sorted(counts.items(), key=lambda item: -item[1]):
            print(f"    {key}: {count}")
    print("=" * 60 + "\n")


async def main():
    parser = argparse.ArgumentParser(description="Load test the Circle Enclosure API")
    parser.add_argument("--url", default="http://localhost:8000", help="Base URL of the API")
    parser.add_argument("--requests", type=int, default=500, help="Number of requests (default: 500)")
    parser.add_argument("--concurrent", type=int, default=20, help="Maximum concurrent requests (default: 20)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible workloads")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    print("\n" + "=" * 60)
    print("Circle Enclosure API Load Test")
    print(f"Preparing to send {args.requests} requests with {args.concurrent} concurrent connections")
    print("=" * 60 + "\n")

    # Check if API is reachable
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{args.url}/health", timeout=5.0)
            if response.status_code != 200:
                print(f"WARN API returned status {response.status_code}\n")
    except httpx.HTTPError as e:
        print(f"ERROR Cannot reach API: {e}")
        print("Make sure to run: uvicorn src.enclosure.main:app")
        return

    start = time.perf_counter()
    results = await run_load_test(args.url, args.requests, args.concurrent)
    display_results(results, time.perf_counter() - start)


if __name__ == "__main__":
    asyncio.run(main())
