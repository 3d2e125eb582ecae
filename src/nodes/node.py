# src/nodes/node.py

from dataclasses import dataclass, asdict, replace


@dataclass(frozen=True)
class Node:
    """
    Node fisik yang menjadi target di ring.
    :param identity: ID unik (ditentukan oleh pemanggil).
    :param address: Alamat jaringan, cth: '192.168.1.1'.
    :param port: Port layanan.
    :param display_name: Nama tampilan, cth: 'host_1'.
    :param weight: Bobot (>= 1). Jumlah virtual node = replicas * weight.
    """
    identity: int
    address: str
    port: int
    display_name: str
    weight: int = 1

    def __post_init__(self):
        if self.weight < 1:
            raise ValueError(f"weight must be >= 1, got {self.weight}")

    def copy(self) -> "Node":
        """Salinan independen, ring tidak pernah menyimpan objek milik pemanggil."""
        return replace(self)

    def to_dict(self) -> dict:
        return asdict(self)
