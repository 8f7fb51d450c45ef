"""
scripts/bench_hankel_conv_cpu.py

Benchmark script (NOT a unit test) comparing two ways of computing the
Hankel contractions on the CPU:

1) offset-loop kernels (`conv_v2h`, `conv_h2v`), which never materialize
   the sliding-window tensor
2) materialized path: build the dense Hankel tensor with `hankel` and contract
   it with a single `np.tensordot`

The materialized path only exists for visible -> hidden; hidden -> visible is
timed on its own together with its weight gradient.

Usage examples
--------------
# Default presets
python scripts/bench_hankel_conv_cpu.py --presets

# A single 2D case
python scripts/bench_hankel_conv_cpu.py --C 8 --M 16 --N 64 64 --J 5 5 --B 4

Notes
-----
- Timings include Python call overhead; they measure the public API.
- The materialized path allocates `prod(J)` times the visible tensor and can
  run out of memory on large inputs.
"""

from __future__ import annotations

import os
import sys

# Ensure repo_root/src is importable when running this file directly:
# repo_root/
#   src/hankeltensors/...
#   scripts/bench_hankel_conv_cpu.py
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
ROOT_DIR = os.path.abspath(os.path.join(THIS_DIR, ".."))
SRC_DIR = os.path.join(ROOT_DIR, "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import argparse
import statistics
import time
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from hankeltensors import (
    conv_h2v,
    conv_h2v_weight_grad,
    conv_v2h,
    hankel,
)


@dataclass(frozen=True)
class Case:
    name: str
    C: int
    M: int
    N: Tuple[int, ...]
    J: Tuple[int, ...]
    B: int


def _median(xs: list[float]) -> float:
    return statistics.median(xs)


def _fmt_seconds(s: float) -> str:
    if s < 1e-3:
        return f"{s * 1e6:.1f} us"
    if s < 1:
        return f"{s * 1e3:.2f} ms"
    return f"{s:.3f} s"


def _time_one(fn: Callable[[], None], *, warmup: int, repeats: int) -> list[float]:
    for _ in range(warmup):
        fn()
    times = []
    for _ in range(repeats):
        t0 = time.perf_counter()
        fn()
        t1 = time.perf_counter()
        times.append(t1 - t0)
    return times


def _v2h_materialized(w: np.ndarray, v: np.ndarray) -> np.ndarray:
    n = w.ndim - 2
    A = hankel(v, (v.shape[0],), w.shape[1 : 1 + n])
    axes = list(range(1 + n))
    return np.tensordot(w, A, axes=(axes, axes))


def bench_case(c: Case, *, dtype, warmup: int, repeats: int, seed: int) -> None:
    rng = np.random.default_rng(seed)
    K = tuple(n - j + 1 for n, j in zip(c.N, c.J))

    w = rng.standard_normal((c.C, *c.J, c.M)).astype(dtype)
    v = rng.standard_normal((c.C, *c.N, c.B)).astype(dtype)
    h = rng.standard_normal((c.M, *K, c.B)).astype(dtype)

    # both paths must agree before timing means anything
    np.testing.assert_allclose(
        conv_v2h(w, v), _v2h_materialized(w, v), rtol=1e-3, atol=1e-3
    )

    t_loop = _median(_time_one(lambda: conv_v2h(w, v), warmup=warmup, repeats=repeats))
    t_dense = _median(
        _time_one(lambda: _v2h_materialized(w, v), warmup=warmup, repeats=repeats)
    )
    t_h2v = _median(_time_one(lambda: conv_h2v(w, h), warmup=warmup, repeats=repeats))
    grad_v = conv_h2v(w, h)
    t_dw = _median(
        _time_one(
            lambda: conv_h2v_weight_grad(grad_v, w, h),
            warmup=warmup,
            repeats=repeats,
        )
    )

    print(
        f"{c.name}: C={c.C} M={c.M} N={c.N} J={c.J} B={c.B} "
        f"dtype={np.dtype(dtype).name} | "
        f"v2h loop={_fmt_seconds(t_loop):>10}  v2h dense={_fmt_seconds(t_dense):>10}  "
        f"speedup={t_dense / t_loop:>6.2f}x | "
        f"h2v={_fmt_seconds(t_h2v):>10}  dw={_fmt_seconds(t_dw):>10}"
    )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--C", type=int, default=4)
    ap.add_argument("--M", type=int, default=8)
    ap.add_argument("--N", type=int, nargs="+", default=[32, 32])
    ap.add_argument("--J", type=int, nargs="+", default=[3, 3])
    ap.add_argument("--B", type=int, default=4)
    ap.add_argument("--dtype", choices=["float32", "float64"], default="float64")
    ap.add_argument("--warmup", type=int, default=3)
    ap.add_argument("--repeats", type=int, default=20)
    ap.add_argument("--presets", action="store_true")
    ap.add_argument("--seed", type=int, default=0)
    args = ap.parse_args()

    if len(args.N) != len(args.J):
        ap.error("--N and --J must have the same number of entries")

    dtype = np.float32 if args.dtype == "float32" else np.float64

    if args.presets:
        cases = [
            Case("1d-long", 4, 8, (4096,), (16,), 8),
            Case("2d-small", 4, 8, (32, 32), (3, 3), 4),
            Case("2d-wide", 8, 16, (64, 64), (5, 5), 4),
            Case("3d", 2, 4, (16, 16, 16), (3, 3, 3), 2),
        ]
    else:
        cases = [
            Case(
                "single",
                int(args.C),
                int(args.M),
                tuple(int(x) for x in args.N),
                tuple(int(x) for x in args.J),
                int(args.B),
            )
        ]

    print("\n" + "=" * 120)
    print(
        f"Hankel contraction CPU benchmark | dtype={np.dtype(dtype).name} "
        f"(warmup={args.warmup}, repeats={args.repeats})"
    )
    print("=" * 120)

    for c in cases:
        bench_case(
            c, dtype=dtype, warmup=args.warmup, repeats=args.repeats, seed=args.seed
        )


if __name__ == "__main__":
    main()
