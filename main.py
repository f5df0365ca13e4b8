from random import Random
from time import sleep, perf_counter

from lazy import ensure_sequence, deferred
from generators import positives, all_integers


def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.05)
    return x * x


print("\n--- Demo: laziness over an infinite source ---")
pipeline = (
    positives()
    .map(expensive_transform)
    .select(lambda v: v % 2 == 0)
    .skip(2)
)
print("Constructed pipeline. No output yet (nothing computed).")
t0 = perf_counter()
out = pipeline.grab(3)
t1 = perf_counter()
print(f"Result: {out}")
print(f"Time: {t1 - t0:.2f}s\n")

print("--- Demo: peek does not consume ---")
seq = ensure_sequence([10, 20, 30])
print(f"peek -> {seq.peek()}, peek -> {seq.peek()}, next -> {seq.next()}, next -> {seq.next()}\n")

print("--- Demo: boundaries ---")
print("start_when(x >= 3):", ensure_sequence(range(1, 11)).start_when(lambda x: x >= 3).grab(3))
print("start_after(x >= 3):", ensure_sequence(range(1, 11)).start_after(lambda x: x >= 3).grab(3))
print("do_while(x <= 3):", ensure_sequence([1, 2, 3, 4, 5]).do_while(lambda x: x <= 3).to_list())
print("do_until(x >= 3):", ensure_sequence([1, 2, 3, 4, 5]).do_until(lambda x: x >= 3).to_list())
print("stop_when(x >= 3):", ensure_sequence(range(1, 11)).stop_when(lambda x: x >= 3).to_list())
print()

print("--- Demo: weaving and diagonalization ---")
print("weave:", ensure_sequence([[1, 2, 3], [4], [7, 8, 9]]).weave().to_list())
rows = positives().map(lambda n: positives().map(lambda k, n=n: (n, k)))
print("diagonalize:", rows.diagonalize().grab(10))
print("all integers:", all_integers().grab(11))
print()

print("--- Demo: bounded shuffle ---")
print("randomly:", ensure_sequence(range(1, 21)).randomly(rng=Random(7)).to_list())
print()

print("--- Demo: deferred (first pull computes; later pulls reuse) ---")


def load_rows():
    print("  loading rows ...")
    sleep(0.2)
    return ["a", "b", "c"]


rows_seq = deferred(load_rows)
print("Deferred sequence created (nothing loaded yet).")
print("First pull:", rows_seq.next())
print("Remaining:", rows_seq.to_list())
print("Replayed three times:", deferred(lambda: [1, 2]).repeat(3).to_list())
