#!/usr/bin/env python3
# tools/invariants_runner.py
#
# Determinism invariants (property tests) for bcodec.
#
# This runner:
# - generates random value trees (int/bytes/list/dict, bytes keys)
# - checks algebraic invariants: round trip, determinism, canonical re-encode,
#   insertion-order fidelity, depth boundary, trailing-garbage rejection
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import os, sys, json, base64, random
from typing import Any, Dict

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

import bcodec
from bcodec import DecodeError, DecodeOptions

SEED = int(os.environ.get("BCODEC_SEED", "1337"))
TRIALS = int(os.environ.get("BCODEC_TRIALS", "2000"))
MAX_GEN_DEPTH = int(os.environ.get("BCODEC_GEN_MAX_DEPTH", "6"))
MAX_KEYS = int(os.environ.get("BCODEC_GEN_MAX_KEYS", "6"))
MAX_LIST = int(os.environ.get("BCODEC_GEN_MAX_LIST", "6"))
MAX_BYTES = int(os.environ.get("BCODEC_GEN_MAX_BYTES", "32"))

random.seed(SEED)

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def rand_bytes() -> bytes:
    return bytes(random.getrandbits(8) for _ in range(random.randint(0, MAX_BYTES)))

def rand_int() -> int:
    r = random.random()
    if r < 0.6:
        return random.randint(-1000, 1000)
    if r < 0.9:
        return random.randint(-(2**63), 2**63 - 1)
    return random.randint(-(2**200), 2**200)

def gen_value(depth: int) -> Any:
    if depth >= MAX_GEN_DEPTH:
        return rand_bytes() if random.random() < 0.6 else rand_int()
    r = random.random()
    if r < 0.35:
        n = random.randint(0, MAX_KEYS)
        d: Dict[bytes, Any] = {}
        for _ in range(n):
            d[rand_bytes()] = gen_value(depth + 1)
        return d
    if r < 0.65:
        return [gen_value(depth + 1) for _ in range(random.randint(0, MAX_LIST))]
    return rand_bytes() if random.random() < 0.6 else rand_int()

def max_nesting(v: Any) -> int:
    best = 0
    stack = [(v, 1)]
    while stack:
        cur, d = stack.pop()
        if isinstance(cur, list):
            best = max(best, d)
            stack.extend((c, d + 1) for c in cur)
        elif isinstance(cur, dict):
            best = max(best, d)
            stack.extend((c, d + 1) for c in cur.values())
    return best

def fail(label: str, context: Dict[str, Any]) -> None:
    print("INVARIANT VIOLATION:", label)
    print("CTX:", json.dumps(context, ensure_ascii=False)[:2000])
    raise SystemExit(1)

def check(cond: bool, label: str, context: Dict[str, Any]) -> None:
    if not cond:
        fail(label, context)

def main() -> int:
    unlimited = DecodeOptions(max_depth=None)
    for i in range(TRIALS):
        v = gen_value(0)
        enc = bcodec.encode(v)
        ctx = {"trial": i, "bencode_b64": b64(enc)}

        # I1: round trip
        dec = bcodec.decode(enc, unlimited)
        check(dec == v, "I1 decode(encode(v)) == v", ctx)

        # I2: determinism
        check(bcodec.encode(v) == enc, "I2 encode deterministic", ctx)
        check(bcodec.decode(enc, unlimited) == dec, "I2 decode deterministic", ctx)

        # I3: insertion order is what goes on the wire
        check(bcodec.encode(dec) == enc, "I3 encode(decode(b)) == b", ctx)

        # I4: sorted output is canonical and passes strict decoding
        canon = bcodec.encode(v, sort_keys=True)
        strict = DecodeOptions(max_depth=None, strict=True)
        check(bcodec.decode(canon, strict) == v, "I4 strict decode of sorted output", ctx)
        check(bcodec.encode(bcodec.decode(canon), sort_keys=True) == canon,
              "I4 canonical form is a fixed point", ctx)

        # I5: depth boundary
        k = max_nesting(v)
        if k > 0:
            check(bcodec.decode(enc, DecodeOptions(max_depth=k)) == v,
                  "I5 decodes at max_depth == nesting", ctx)
            try:
                bcodec.decode(enc, DecodeOptions(max_depth=k - 1))
                fail("I5 nesting k must fail at max_depth k-1", ctx)
            except DecodeError as e:
                check(e.code == bcodec.ERR_STRUCTURE_TOO_DEEP, "I5 error code", ctx)

        # I6: trailing garbage is rejected at the right offset
        try:
            bcodec.decode(enc + b"x", unlimited)
            fail("I6 trailing byte accepted", ctx)
        except DecodeError as e:
            check(e.code == bcodec.ERR_TRAILING_GARBAGE and e.offset == len(enc),
                  "I6 trailing garbage code/offset", ctx)

    print(f"OK: invariants trials={TRIALS} seed={SEED}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
