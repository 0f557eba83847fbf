"""Benchmark: Session validation latency — per-call p50/p99.

Measures the per-call latency of SessionManager.validate_session() against
a populated in-memory store, background TTL refreshes included.
"""
from __future__ import annotations

import asyncio
import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kv_sessions.session.manager import SessionManager
from kv_sessions.session.repository import KeyValueSessionRepository
from kv_sessions.storage.memory import InMemoryBackend

_USERS: int = 1_000
_ITERATIONS: int = 5_000


async def _measure() -> list[float]:
    manager = SessionManager(KeyValueSessionRepository(InMemoryBackend()))
    session_ids = [await manager.create_session(user_id) for user_id in range(_USERS)]

    latencies_ms: list[float] = []
    for i in range(_ITERATIONS):
        user_id = i % _USERS
        t0 = time.perf_counter()
        await manager.validate_session(user_id, session_ids[user_id])
        latencies_ms.append((time.perf_counter() - t0) * 1000)
    await manager.wait_for_refreshes()
    return latencies_ms


def bench_session_validation_latency() -> dict[str, object]:
    """Benchmark SessionManager.validate_session() per-call latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p50_latency_ms, p99_latency_ms.
    """
    latencies_ms = asyncio.run(_measure())

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "session_validation_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p50_latency_ms": round(sorted_lats[n // 2], 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
    }
    print(
        f"[bench_session_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_session_validation_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
