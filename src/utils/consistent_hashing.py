# src/utils/consistent_hashing.py

import bisect
import zlib
from typing import Iterable, Tuple

from nodes.node import Node

HASH_SPACE = 0xFFFFFFFF


class RingEmptyError(LookupError):
    """Lookup dilakukan pada ring yang belum punya node sama sekali."""


def hash_key(key: str) -> int:
    """CRC-32 (IEEE) dari bytes UTF-8 key, sebagai unsigned 32-bit."""
    return zlib.crc32(key.encode("utf-8")) & HASH_SPACE


def join_key(node: Node, replica_index: int) -> str:
    """
    Composite key untuk satu virtual node.
    Format '<address>*<weight>-<replica>-<identity>' JANGAN diubah,
    setiap perubahan akan memindahkan semua penempatan.
    """
    return f"{node.address}*{node.weight}-{replica_index}-{node.identity}"


class HashRing:
    """Kumpulan hash terurut (ascending, tanpa duplikat) untuk binary search."""

    def __init__(self, hashes: Iterable[int] = ()):
        self._hashes = []
        self.rebuild(hashes)

    def rebuild(self, hashes: Iterable[int]):
        """Bangun ulang dari nol. Tidak ada insert inkremental."""
        self._hashes = sorted(set(hashes))

    def search(self, h: int) -> int:
        """
        Mencari posisi entry pertama yang >= h.
        Jika posisi jatuh di luar ring ATAU tepat di entry terakhir,
        hasilnya wrap-around ke index 0.
        """
        if not self._hashes:
            raise RingEmptyError("hash ring is empty")

        idx = bisect.bisect_left(self._hashes, h)
        if idx >= len(self._hashes) - 1:
            return 0
        return idx

    def hashes(self) -> Tuple[int, ...]:
        return tuple(self._hashes)

    def __getitem__(self, idx: int) -> int:
        return self._hashes[idx]

    def __len__(self):
        return len(self._hashes)

    def __iter__(self):
        return iter(self._hashes)
