# src/main.py

import os
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
import uvicorn

from nodes.node import Node
from nodes.ring_manager import RingManager, DEFAULT_REPLICAS
from utils.consistent_hashing import RingEmptyError, hash_key
from utils.stats import summarize

# Konfigurasi
# Ambil dari environment variables
REPLICAS = int(os.environ.get('RING_REPLICAS', DEFAULT_REPLICAS))
API_PORT = int(os.environ.get('API_PORT', 8080))
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
# Format: "0@192.168.1.0:8080,1@192.168.1.1:8080" (bobot default 1, atau "0@host:port/3")
BOOTSTRAP_NODES = os.environ.get('RING_BOOTSTRAP_NODES', '')

# Setup logging
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("Main")


def parse_bootstrap_nodes(value: str) -> List[Node]:
    """Parse daftar node dari string RING_BOOTSTRAP_NODES."""
    nodes = []
    for item in filter(None, (s.strip() for s in value.split(','))):
        weight = 1
        if '/' in item:
            item, weight_str = item.rsplit('/', 1)
            weight = int(weight_str)
        identity, _, hostport = item.partition('@')
        address, _, port = hostport.rpartition(':')
        if not identity or not address or not port:
            raise ValueError(f"invalid bootstrap node entry: {item!r}")
        nodes.append(Node(int(identity), address, int(port), f"host_{identity}", weight))
    return nodes


# Inisialisasi Objek
app = FastAPI()
ring = RingManager(replicas=REPLICAS)
for _node in parse_bootstrap_nodes(BOOTSTRAP_NODES):
    ring.add(_node)

# --- Model Request/Response ---

class NodeModel(BaseModel):
    identity: int
    address: str = Field(min_length=1)
    port: int = Field(ge=0, le=65535)
    display_name: str = ""
    weight: int = Field(default=1, ge=1)

    def to_node(self) -> Node:
        return Node(self.identity, self.address, self.port, self.display_name or f"host_{self.identity}", self.weight)

    @classmethod
    def from_node(cls, node: Node) -> "NodeModel":
        return cls(**node.to_dict())

class LookupResponse(BaseModel):
    key: str
    hash: int
    node: NodeModel

class DistributionRequest(BaseModel):
    keys: List[str] = Field(min_length=1)

class DistributionResponse(BaseModel):
    counts: dict
    summary: dict

class StatusResponse(BaseModel):
    replicas: int
    node_count: int
    virtual_node_count: int
    members: Optional[List[int]] = None

# --- API Endpoints untuk Ring ---
# Handler sinkron (def): FastAPI menjalankannya di threadpool,
# jadi ReadWriteLock (berbasis thread) tidak memblokir event loop.

@app.post("/ring/nodes", status_code=201)
def api_add_node(request: NodeModel):
    node = request.to_node()
    if not ring.add(node):
        raise HTTPException(status_code=409, detail={"error": "Node already registered", "identity": node.identity})
    return {"success": True, "node": NodeModel.from_node(node)}

@app.delete("/ring/nodes/{identity}")
def api_remove_node(identity: int):
    # Pakai salinan yang tersimpan, supaya address/weight pasti sama dengan saat add
    registered = next((n for n in ring.members() if n.identity == identity), None)
    if registered is None:
        raise HTTPException(status_code=404, detail={"error": "Node not registered", "identity": identity})
    ring.remove(registered)
    return {"success": True, "identity": identity}

@app.get("/ring/nodes")
def api_list_nodes() -> List[NodeModel]:
    return [NodeModel.from_node(n) for n in ring.members()]

@app.get("/ring/lookup")
def api_lookup(key: str) -> LookupResponse:
    try:
        node = ring.get(key)
    except RingEmptyError as e:
        raise HTTPException(status_code=503, detail={"error": str(e)})
    return LookupResponse(key=key, hash=hash_key(key), node=NodeModel.from_node(node))

@app.post("/ring/distribution")
def api_distribution(request: DistributionRequest) -> DistributionResponse:
    try:
        counts = ring.distribution(request.keys)
    except RingEmptyError as e:
        raise HTTPException(status_code=503, detail={"error": str(e)})
    return DistributionResponse(counts={str(k): v for k, v in counts.items()}, summary=summarize(counts))

@app.get("/ring/status")
def api_ring_status() -> StatusResponse:
    """Endpoint untuk debugging."""
    members = ring.members()
    return StatusResponse(
        replicas=ring.replicas,
        node_count=len(members),
        virtual_node_count=ring.virtual_node_count(),
        members=[n.identity for n in members],
    )

# --- Startup ---

@app.on_event("startup")
async def on_startup():
    logger.info(f"Ring service starting up with {len(ring)} nodes, replicas={REPLICAS}")

if __name__ == "__main__":
    logger.info(f"Starting server on 0.0.0.0:{API_PORT}")
    uvicorn.run(app, host="0.0.0.0", port=API_PORT)
