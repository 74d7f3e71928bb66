#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Mutation fuzzing for the bcodec decoder.
#
# Generates three fuzz categories:
#   A) valid encodings with random byte flips / inserts / deletes
#   B) valid encodings truncated at a random point
#   C) random byte soup drawn from the bencode alphabet
#
# For every input, decode must either return a value or raise DecodeError
# with one of the documented decode error codes
# (nothing else), must do so deterministically, and any value it returns
# must re-encode to bytes that decode back to the same value.
#
# Any violation prints a minimal repro payload and exits non-zero.

import os, sys, json, base64, random
from typing import Any, Dict, Optional, Tuple

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

import bcodec
from bcodec import DecodeError, DecodeOptions
from bcodec._errors import DECODE_ERRORS

SEED = int(os.environ.get("BCODEC_SEED", "4242"))
ROUNDS = int(os.environ.get("BCODEC_FUZZ_ROUNDS", "5000"))
MAX_DEPTH = int(os.environ.get("BCODEC_FUZZ_MAX_DEPTH", "16"))

random.seed(SEED)

ALPHABET = b"ilde0123456789:-x "

def b64(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def decode_or_err(raw: bytes, options: DecodeOptions) -> Tuple[str, Any]:
    try:
        return "ok", bcodec.decode(raw, options)
    except DecodeError as e:
        return "err", (e.code, e.offset, e.byte)

def violation(label: str, raw: bytes, extra: Optional[Dict[str, Any]] = None) -> None:
    print("VIOLATION:", label)
    ctx = {"input_b64": b64(raw)}
    ctx.update(extra or {})
    print("CTX:", json.dumps(ctx, ensure_ascii=False, default=repr)[:4000])
    raise SystemExit(1)

# --- generators ---

def rand_value(depth: int) -> Any:
    if depth > 4 or random.random() < 0.4:
        if random.random() < 0.5:
            return random.randint(-10**6, 10**6)
        return bytes(random.getrandbits(8) for _ in range(random.randint(0, 12)))
    if random.random() < 0.5:
        return {bytes(random.getrandbits(8) for _ in range(random.randint(0, 6))): rand_value(depth + 1)
                for _ in range(random.randint(0, 4))}
    return [rand_value(depth + 1) for _ in range(random.randint(0, 4))]

def mutate(raw: bytes) -> bytes:
    buf = bytearray(raw)
    for _ in range(random.randint(1, 3)):
        op = random.random()
        pos = random.randint(0, len(buf))
        if op < 0.4 and pos < len(buf):
            buf[pos] = random.choice(ALPHABET)
        elif op < 0.7:
            buf.insert(pos, random.choice(ALPHABET))
        elif pos < len(buf):
            del buf[pos]
    return bytes(buf)

def truncate(raw: bytes) -> bytes:
    return raw[:random.randint(0, len(raw))]

def soup() -> bytes:
    return bytes(random.choice(ALPHABET) for _ in range(random.randint(0, 24)))

def main() -> int:
    options = DecodeOptions(max_depth=MAX_DEPTH)
    counts = {"ok": 0, "err": 0}

    for i in range(ROUNDS):
        r = random.random()
        if r < 0.5:
            raw = mutate(bcodec.encode(rand_value(0)))
        elif r < 0.8:
            raw = truncate(bcodec.encode(rand_value(0)))
        else:
            raw = soup()

        try:
            first = decode_or_err(raw, options)
        except Exception as e:  # anything but DecodeError is a bug
            violation("unexpected exception {}: {}".format(type(e).__name__, e), raw, {"round": i})
        if decode_or_err(raw, options) != first:
            violation("non-deterministic result", raw, {"round": i})

        kind, payload = first
        counts[kind] += 1
        if kind == "err" and payload[0] not in DECODE_ERRORS:
            violation("unknown error code " + payload[0], raw, {"round": i})
        if kind == "ok" and payload is not None:
            again = bcodec.decode(bcodec.encode(payload), options)
            if again != payload:
                violation("re-encode changed the value", raw, {"round": i})

    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} decoded={counts['ok']} rejected={counts['err']}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
