"""Benchmark: Session create/read throughput — operations per second.

Measures how many create_session + get_session_data round-trips can be
completed per second using the in-memory backend.
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

_ITERATIONS: int = 5_000


async def _measure() -> list[float]:
    manager = SessionManager(KeyValueSessionRepository(InMemoryBackend()))
    latencies_ms: list[float] = []
    for user_id in range(_ITERATIONS):
        t0 = time.perf_counter()
        await manager.create_session(user_id, {"locale": "en"})
        await manager.get_session_data(user_id)
        latencies_ms.append((time.perf_counter() - t0) * 1000)
    return latencies_ms


def bench_session_create_read_throughput() -> dict[str, object]:
    """Benchmark SessionManager create+read round-trip throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms.
    """
    latencies_ms = asyncio.run(_measure())

    total = sum(latencies_ms) / 1000
    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)

    result: dict[str, object] = {
        "operation": "session_create_read_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
    }
    print(
        f"[bench_session_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_session_create_read_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "throughput_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
