"""A Fiat-Shamir channel that draws field elements from a Blake2s digest chain."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from itertools import islice
from typing import Iterator, Sequence

from circle_stark.m31 import M31, P
from circle_stark.qm31 import SECURE_EXTENSION_DEGREE, QM31

BLAKE_BYTES_PER_HASH = 32
FELTS_PER_HASH = 8
EXTENSION_FELTS_PER_HASH = 2
N_BYTES_FELT = 4


@dataclass
class ChannelTime:
    """Counts the challenges mixed in and the values drawn since the last one."""

    n_challenges: int = 0
    n_sent: int = 0

    def inc_sent(self) -> None:
        self.n_sent += 1

    def inc_challenges(self) -> None:
        self.n_challenges += 1
        self.n_sent = 0


def _blake2s(data: bytes) -> bytes:
    return hashlib.blake2s(data, digest_size=BLAKE_BYTES_PER_HASH).digest()


def _check_digest(digest: bytes) -> bytes:
    digest = bytes(digest)
    if len(digest) != BLAKE_BYTES_PER_HASH:
        raise ValueError(
            f"digest must be {BLAKE_BYTES_PER_HASH} bytes, got {len(digest)}"
        )
    return digest


class Blake2sChannel:
    """A channel that draws random elements from a Blake2s digest."""

    BYTES_PER_HASH = BLAKE_BYTES_PER_HASH

    def __init__(self, digest: bytes) -> None:
        self.digest = _check_digest(digest)
        self.channel_time = ChannelTime()

    def mix_digest(self, digest: bytes) -> None:
        self.digest = _blake2s(self.digest + _check_digest(digest))
        self.channel_time.inc_challenges()

    def mix_felts(self, felts: Sequence[QM31]) -> None:
        encoded = b"".join(
            struct.pack("<4I", *(v.value for v in felt.to_m31_array())) for felt in felts
        )
        self.digest = _blake2s(self.digest + encoded)
        self.channel_time.inc_challenges()

    def mix_nonce(self, nonce: int) -> None:
        if not 0 <= nonce < 1 << 64:
            raise ValueError("nonce must fit in 64 bits")
        padded_nonce = nonce.to_bytes(8, "little").ljust(BLAKE_BYTES_PER_HASH, b"\0")
        self.digest = _blake2s(self.digest + padded_nonce)
        self.channel_time.inc_challenges()

    def draw_felt(self) -> QM31:
        felts = self._draw_base_felts()
        return QM31.from_m31_array(felts[:SECURE_EXTENSION_DEGREE])

    def draw_felts(self, n_felts: int) -> list[QM31]:
        """Draw `n_felts` uniformly random secure field elements."""
        if n_felts < 0:
            raise ValueError("n_felts must be non-negative")
        return list(islice(self._secure_felt_stream(), n_felts))

    def draw_random_bytes(self) -> bytes:
        """Return BYTES_PER_HASH random bytes."""
        padded_counter = self.channel_time.n_sent.to_bytes(8, "little").ljust(
            BLAKE_BYTES_PER_HASH, b"\0"
        )
        hash_input = self.digest + padded_counter
        self.channel_time.inc_sent()
        return _blake2s(hash_input)

    def _draw_base_felts(self) -> tuple[M31, ...]:
        # Retry until every word lies in [0, 2P); each round fails with probability ~2^-28.
        while True:
            words = struct.unpack(f"<{FELTS_PER_HASH}I", self.draw_random_bytes())
            if all(word < 2 * P for word in words):
                return tuple(M31.reduce(word) for word in words)

    def _secure_felt_stream(self) -> Iterator[QM31]:
        pending: list[M31] = []
        while True:
            if len(pending) < SECURE_EXTENSION_DEGREE:
                pending.extend(self._draw_base_felts())
                continue
            chunk = pending[:SECURE_EXTENSION_DEGREE]
            del pending[:SECURE_EXTENSION_DEGREE]
            yield QM31.from_m31_array(chunk)