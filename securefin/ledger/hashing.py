"""
HashLink: block fingerprints.

A fingerprint binds a block's own fields to its predecessor's fingerprint.
It is a SHA-256 digest over a canonical JSON serialization, so the same
inputs always produce the same hex string.
"""

import hashlib
import json
from datetime import datetime

from securefin.models.ledger import Block, Transaction

# previous_hash of the genesis block
GENESIS_PREVIOUS_HASH = "0" * 64


def canonical_payload(
    index: int,
    timestamp: datetime,
    data: Transaction,
    previous_hash: str,
) -> str:
    """Serialize block fields with sorted keys and no whitespace."""
    payload = {
        "index": index,
        "timestamp": timestamp.isoformat(),
        "data": data.model_dump(mode="json"),
        "previousHash": previous_hash,
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def fingerprint(
    index: int,
    timestamp: datetime,
    data: Transaction,
    previous_hash: str,
) -> str:
    raw = canonical_payload(index, timestamp, data, previous_hash)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def block_fingerprint(block: Block) -> str:
    """Recompute a stored block's fingerprint from its fields."""
    return fingerprint(block.index, block.timestamp, block.data, block.previous_hash)
