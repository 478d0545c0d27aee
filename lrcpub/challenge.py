# Copyright (c) 2024 iiPython

# Modules
import time
import hashlib
import logging
import threading

from pydantic import BaseModel, ConfigDict

from .errors import InvalidChallenge, SolveCancelled, SolveTimeout

# Initialization
DIGEST_SIZE = hashlib.sha256().digest_size

logger = logging.getLogger(__name__)

# Models
class Challenge(BaseModel):
    model_config = ConfigDict(frozen = True)

    prefix: str
    target: str

# Solution class
class Solution:
    """Smallest accepted nonce shared between the search workers."""
    def __init__(self) -> None:
        self.nonce: int | None = None
        self.error: SolveCancelled | None = None
        self._lock = threading.Lock()

    def is_beaten(self, nonce: int) -> bool:
        best = self.nonce
        return best is not None and best < nonce

    def offer(self, nonce: int) -> None:
        with self._lock:
            if self.nonce is None or nonce < self.nonce:
                self.nonce = nonce

class Deadline:
    def __init__(self, timeout: float | None = None, cancel: threading.Event | None = None) -> None:
        self.expires = None if timeout is None else time.monotonic() + timeout
        self.cancel = cancel

    def check(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise SolveCancelled("Challenge solve was cancelled!")

        if self.expires is not None and time.monotonic() >= self.expires:
            raise SolveTimeout("Challenge solve ran past its deadline!")

# Helpers
def decode_target(target: str) -> bytes:
    try:
        target_bytes = bytes.fromhex(target)

    except (TypeError, ValueError):
        raise InvalidChallenge(f"Challenge target is not valid hex: {target!r}") from None

    if len(target_bytes) != DIGEST_SIZE:
        raise InvalidChallenge(f"Challenge target must be {DIGEST_SIZE} bytes, got {len(target_bytes)}!")

    return target_bytes

def digest(prefix: str, nonce: int) -> bytes:
    return hashlib.sha256(f"{prefix}{nonce}".encode()).digest()

def accept(hash_value: bytes, target: bytes) -> bool:
    """Check a digest against the challenge target.

    Both values are compared byte by byte from the most significant end, which
    is the same as `int.from_bytes(hash_value, "big") <= int.from_bytes(target, "big")`.
    A digest equal to the target is accepted."""
    if len(hash_value) != len(target):
        raise InvalidChallenge(f"Cannot compare a {len(hash_value)} byte digest to a {len(target)} byte target!")

    for hashed, limit in zip(hash_value, target):
        if hashed > limit:
            return False

        if hashed < limit:
            return True

    return True

def format_token(prefix: str, nonce: int) -> str:
    return f"{prefix}:{nonce}"

# Search
def find_nonce(
    prefix: str,
    target: bytes,
    solution: Solution,
    deadline: Deadline,
    start: int,
    step: int
) -> Solution:
    nonce = start
    try:
        while not solution.is_beaten(nonce):
            deadline.check()
            if accept(digest(prefix, nonce), target):
                solution.offer(nonce)
                break

            nonce += step

    except SolveCancelled as e:
        solution.error = e

    return solution

def solve(
    prefix: str,
    target: str,
    workers: int = 1,
    timeout: float | None = None,
    cancel: threading.Event | None = None
) -> int:
    """Find the smallest nonce whose digest is accepted by the target.

    `workers` stripes the nonce space across that many threads; every worker
    keeps going until it passes the best nonce found so far, so the answer does
    not depend on the worker count. `timeout` (seconds) and `cancel` are
    checked before every hash and stop the search with `SolveTimeout` or
    `SolveCancelled` respectively."""
    if workers < 1:
        raise ValueError("At least one worker is required!")

    target_bytes, solution, deadline = decode_target(target), Solution(), Deadline(timeout, cancel)
    logger.debug("solving challenge prefix=%s target=%s workers=%d", prefix, target, workers)

    started = time.monotonic()
    if workers == 1:
        find_nonce(prefix, target_bytes, solution, deadline, 0, 1)

    else:
        threads = [
            threading.Thread(
                target = find_nonce,
                args = (prefix, target_bytes, solution, deadline, i, workers),
                daemon = True
            )
            for i in range(workers)
        ]
        [t.start() for t in threads]
        [t.join() for t in threads]

    if solution.error is not None:
        raise solution.error

    logger.debug("solved challenge prefix=%s nonce=%d in %.3fs", prefix, solution.nonce, time.monotonic() - started)
    return solution.nonce  # type: ignore

def solve_token(prefix: str, target: str, **kwargs) -> str:
    return format_token(prefix, solve(prefix, target, **kwargs))
