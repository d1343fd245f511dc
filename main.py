from time import perf_counter

import lazy
from lazy import Lazy, generate, repeat
from utils import setup_logging

setup_logging()


def expensive_transform(x):
    # Print so it is visible when (and how often) work happens
    print(f"  computing f({x}) ...")
    return x * x


print("\n--- Demo: laziness (no work until iterated) ---")
pipeline = (
    Lazy(list(range(1, 10_000)))
    .map(expensive_transform)
    .filter(lambda v: v % 2 == 0)
    .skip(3)
    .take(5)
)

print("Constructed pipeline. No output yet (nothing computed).")
print("\nIterating (should compute only what's needed for 5 items):")
t0 = perf_counter()
out = pipeline.to_list()
t1 = perf_counter()
print(f"Result: {out}")
print(f"Time: {t1 - t0:.4f}s\n")

print("--- Demo: early stop with each() ---")
visited = []
completed = Lazy([[1, 2], [3, [4, 5]]]).flatten().each(
    lambda e, i: visited.append(e) or e != 3
)
print(f"Visited {visited}, completed={completed}\n")

print("--- Demo: infinite sequences ---")
squares = generate(lambda i: i * i)
print(f"First squares: {squares.take(8).to_list()}")
print(f"Repeated: {repeat('hi', 3).to_list()}")
print(f"Evens: {lazy.range(2, 20, 2).to_list()}")
print(f"Printing an infinite sequence is safe: {squares!r}\n")

print("--- Demo: uniq across types ---")
print(Lazy([1, "1", True, 1.0, None, "None", "constructor", 1]).uniq().to_list())

print("\n--- Demo: strings and mappings ---")
print(Lazy("hello").uniq().join(""))
print(Lazy({"a": 1, "b": 2}).to_list())
