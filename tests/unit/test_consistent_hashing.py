import pytest
from nodes.node import Node
from utils.consistent_hashing import HashRing, RingEmptyError, HASH_SPACE, hash_key, join_key

@pytest.fixture
def hash_ring():
    """Ring kecil dengan hash yang mudah dihitung manual."""
    return HashRing([40, 10, 30, 20])

def test_hash_key_is_crc32_ieee():
    """Check value standar CRC-32 (IEEE): '123456789' -> 0xCBF43926."""
    assert hash_key("123456789") == 0xCBF43926
    assert hash_key("") == 0
    assert hash_key("a") == 0xE8B7BE43

def test_hash_key_is_unsigned_32bit():
    for key in ["key0", "key1", "192.168.1.0*1-0-0", "ünïcödé"]:
        h = hash_key(key)
        assert 0 <= h <= HASH_SPACE

def test_join_key_format():
    """Format composite key harus persis sama, separator ikut menentukan penempatan."""
    node = Node(3, "192.168.1.3", 8080, "host_3", 2)
    assert join_key(node, 7) == "192.168.1.3*2-7-3"
    assert join_key(node, 0) == "192.168.1.3*2-0-3"

def test_rebuild_sorts_and_deduplicates():
    ring = HashRing()
    ring.rebuild([30, 10, 30, 20, 10])
    assert ring.hashes() == (10, 20, 30)
    assert len(ring) == 3
    assert list(ring) == [10, 20, 30]

def test_rebuild_replaces_previous_content(hash_ring):
    hash_ring.rebuild([5])
    assert hash_ring.hashes() == (5,)

def test_search_successor(hash_ring):
    """Posisi entry pertama yang >= hash."""
    assert hash_ring.search(0) == 0
    assert hash_ring.search(10) == 0
    assert hash_ring.search(11) == 1
    assert hash_ring.search(20) == 1
    assert hash_ring.search(25) == 2
    assert hash_ring.search(30) == 2

def test_search_wraps_on_last_entry(hash_ring):
    """
    Tes Kunci: Jatuh TEPAT di entry terakhir atau melewatinya -> kembali ke index 0.
    Entry dengan hash maksimum tidak pernah jadi hasil lookup.
    """
    assert hash_ring.search(31) == 0
    assert hash_ring.search(40) == 0
    assert hash_ring.search(41) == 0
    assert hash_ring.search(HASH_SPACE) == 0

def test_search_single_entry():
    ring = HashRing([1234])
    assert ring.search(0) == 0
    assert ring.search(1234) == 0
    assert ring.search(HASH_SPACE) == 0

def test_search_empty_ring_raises():
    with pytest.raises(RingEmptyError):
        HashRing().search(42)
