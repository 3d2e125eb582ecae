# src/nodes/ring_manager.py

import logging
from collections import Counter
from typing import Dict, Iterable, List, Tuple, Union

from nodes.node import Node
from utils.consistent_hashing import HashRing, RingEmptyError, hash_key, join_key
from utils.rwlock import ReadWriteLock

DEFAULT_REPLICAS = 160


class RingManager:
    def __init__(self, replicas: int = DEFAULT_REPLICAS):
        """
        Ring consistent hashing berbobot.
        :param replicas: Jumlah virtual node per satuan bobot, sama untuk semua node di ring ini.
        """
        if replicas <= 0:
            raise ValueError(f"replicas must be > 0, got {replicas}")

        self.replicas = replicas

        # Semua state di bawah ini dijaga oleh SATU read/write lock
        # Format: self.nodes[hash] = Node (salinan)
        self.nodes: Dict[int, Node] = {}
        # Format: self.resources[identity] = Node (salinan), dipakai sebagai set identitas terdaftar
        self.resources: Dict[int, Node] = {}
        self.ring = HashRing()

        self._lock = ReadWriteLock()
        self.logger = logging.getLogger("RingManager")

    def _virtual_hashes(self, node: Node):
        for i in range(self.replicas * node.weight):
            yield hash_key(join_key(node, i))

    def _rebuild_ring(self):
        self.ring.rebuild(self.nodes.keys())

    def add(self, node: Node) -> bool:
        """
        Menambahkan node (dan semua virtual node-nya) ke ring.
        Mengembalikan False jika identity sudah terdaftar (tidak ada perubahan).
        """
        with self._lock.write_locked():
            if node.identity in self.resources:
                self.logger.info(f"Node {node.identity} already registered, add rejected")
                return False

            copy = node.copy()
            for h in self._virtual_hashes(copy):
                # Tabrakan hash: yang terakhir menang
                self.nodes[h] = copy

            self.resources[copy.identity] = copy
            self._rebuild_ring()
            size = len(self.ring)

        self.logger.info(
            f"Added node {copy.identity} ({copy.address}:{copy.port}, weight={copy.weight}), "
            f"ring size={size}"
        )
        return True

    def remove(self, node: Node):
        """
        Menghapus node dari ring. Identity yang tidak terdaftar: no-op.
        Composite key dihitung ulang dari node yang diberikan, jadi address/weight
        HARUS sama dengan saat add, kalau tidak entry-nya tertinggal (orphan).
        """
        with self._lock.write_locked():
            if node.identity not in self.resources:
                self.logger.debug(f"Node {node.identity} not registered, nothing to remove")
                return

            del self.resources[node.identity]

            missing = 0
            foreign = 0
            # Hash kembar milik node ini sendiri cukup dihapus sekali
            for h in set(self._virtual_hashes(node)):
                owner = self.nodes.pop(h, None)
                if owner is None:
                    missing += 1
                elif owner.identity != node.identity:
                    foreign += 1

            self._rebuild_ring()
            size = len(self.ring)

        if missing:
            self.logger.warning(
                f"Removing node {node.identity}: {missing} virtual entries not found "
                f"(address/weight differ from the added node, entries may be orphaned)"
            )
        if foreign:
            self.logger.warning(
                f"Removing node {node.identity}: {foreign} colliding virtual entries "
                f"owned by other nodes were removed too"
            )
        self.logger.info(f"Removed node {node.identity}, ring size={size}")

    def get(self, key: str) -> Node:
        """
        Mendapatkan node yang bertanggung jawab untuk key ini.
        Raise RingEmptyError jika belum ada node.
        """
        with self._lock.read_locked():
            if not self.ring:
                raise RingEmptyError(f"cannot resolve key {key!r}: ring is empty")

            idx = self.ring.search(hash_key(key))
            node = self.nodes[self.ring[idx]]

        self.logger.debug(f"Key '{key}' -> node {node.identity}")
        return node

    # --- Introspeksi ---

    def members(self) -> List[Node]:
        """Node yang terdaftar, diurutkan berdasarkan identity."""
        with self._lock.read_locked():
            return sorted(self.resources.values(), key=lambda n: n.identity)

    def virtual_node_count(self) -> int:
        with self._lock.read_locked():
            return len(self.ring)

    def snapshot(self) -> Tuple[Tuple[int, ...], Dict[int, Node]]:
        """(hash terurut, salinan mapping hash -> node) yang diambil secara atomik."""
        with self._lock.read_locked():
            return self.ring.hashes(), dict(self.nodes)

    def distribution(self, keys: Iterable[str]) -> Dict[int, int]:
        """
        Jumlah key per identity node, dalam satu critical section.
        Node terdaftar yang tidak mendapat key tetap muncul dengan nilai 0.
        """
        # Iterable milik pemanggil dihabiskan SEBELUM lock diambil
        keys = list(keys)
        with self._lock.read_locked():
            if not self.ring:
                raise RingEmptyError("cannot compute distribution: ring is empty")
            counts = Counter({identity: 0 for identity in self.resources})
            for key in keys:
                counts[self.nodes[self.ring[self.ring.search(hash_key(key))]].identity] += 1
        return dict(counts)

    def __len__(self):
        with self._lock.read_locked():
            return len(self.resources)

    def __contains__(self, item: Union[int, Node]) -> bool:
        identity = item.identity if isinstance(item, Node) else item
        with self._lock.read_locked():
            return identity in self.resources
