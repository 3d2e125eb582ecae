# src/demo.py

import os
import logging
from collections import Counter

from nodes.node import Node
from nodes.ring_manager import RingManager
from utils.stats import standard_deviation, expectation

# Konfigurasi dari environment variables
NODE_COUNT = int(os.environ.get('DEMO_NODE_COUNT', 10))
DATA_COUNT = int(os.environ.get('DEMO_DATA_COUNT', 1_000_000))
REPLICAS = int(os.environ.get('RING_REPLICAS', 160))
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("Demo")


def build_ring(node_count: int = NODE_COUNT, replicas: int = REPLICAS) -> RingManager:
    """Ring dengan node '192.168.1.<i>', port 8080, bobot 1."""
    ring = RingManager(replicas=replicas)
    for i in range(node_count):
        ring.add(Node(i, f"192.168.1.{i}", 8080, f"host_{i}", 1))
    return ring


def count_by_address(ring: RingManager, data_count: int = DATA_COUNT) -> Counter:
    ip_map = Counter()
    for i in range(data_count):
        ip_map[ring.get(f"key{i}").address] += 1
    return ip_map


def main():
    logger.info(f"Building ring: {NODE_COUNT} nodes, replicas={REPLICAS}")
    ring = build_ring()

    logger.info(f"Resolving {DATA_COUNT} keys")
    ip_map = count_by_address(ring)

    print("Data distribution:")
    for ip, count in sorted(ip_map.items()):
        print(f"  node IP: {ip:<15} keys: {count}")

    values = list(ip_map.values())
    print(f"Expectation: {expectation(values, NODE_COUNT):.2f}")
    print(f"Standard deviation: {standard_deviation(values):.2f}")


if __name__ == "__main__":
    main()
