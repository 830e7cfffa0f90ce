"""
Append-Only Ledger

DESIGN DECISION: The ledger is a hash-linked list of frozen Blocks.
- Blocks enter only through genesis() and append()
- Nothing is ever mutated or removed after append
- Integrity is checked by re-walking the chain, never repaired

The chain is valid iff every block's recomputed hash matches its stored
hash, every non-genesis block's previous_hash equals the prior block's
hash, and indexes run 0..N-1 without gaps.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from securefin.exceptions import (
    ChainIntegrityError,
    EmptyLedgerError,
    GenesisExistsError,
)
from securefin.ledger.hashing import (
    GENESIS_PREVIOUS_HASH,
    block_fingerprint,
    fingerprint,
)
from securefin.models.ledger import (
    Block,
    Category,
    Transaction,
    TransactionType,
    utc_now,
)


class Ledger:
    """
    Ordered, append-only sequence of Blocks for one account.

    The clock is injectable so tests can pin timestamps.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._blocks: list[Block] = []
        self._clock = clock or utc_now

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def blocks(self) -> tuple[Block, ...]:
        """Snapshot of the chain, genesis first."""
        return tuple(self._blocks)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Transaction history, genesis payload excluded."""
        return tuple(block.data for block in self._blocks[1:])

    def _make_block(self, index: int, data: Transaction, previous_hash: str) -> Block:
        timestamp = self._clock()
        return Block(
            index=index,
            timestamp=timestamp,
            data=data,
            previous_hash=previous_hash,
            hash=fingerprint(index, timestamp, data, previous_hash),
        )

    def genesis(self, opening_balance: Decimal = Decimal("0")) -> Block:
        """
        Create the single starting block.

        The genesis payload carries the opening balance so that replaying
        the chain reproduces the account balance from block 0.
        """
        if self._blocks:
            raise GenesisExistsError("Ledger already has a genesis block")

        data = Transaction(
            timestamp=self._clock(),
            type=TransactionType.INCOME,
            category=Category.OTHER,
            amount=opening_balance,
            description="Genesis Block",
        )
        block = self._make_block(0, data, GENESIS_PREVIOUS_HASH)
        self._blocks.append(block)
        return block

    def latest(self) -> Block:
        if not self._blocks:
            raise EmptyLedgerError("Ledger used before genesis")
        return self._blocks[-1]

    def append(self, transaction: Transaction) -> Block:
        """Link a transaction to the latest block and add it to the chain."""
        previous = self.latest()
        block = self._make_block(previous.index + 1, transaction, previous.hash)
        self._blocks.append(block)
        return block

    def find_broken_link(self) -> Optional[int]:
        """Return the index of the first invalid block, or None if intact."""
        previous: Optional[Block] = None
        for position, block in enumerate(self._blocks):
            if block.index != position:
                return position
            if block_fingerprint(block) != block.hash:
                return position
            if previous is None:
                if block.previous_hash != GENESIS_PREVIOUS_HASH:
                    return position
            elif block.previous_hash != previous.hash:
                return position
            previous = block
        return None

    def verify(self) -> bool:
        return self.find_broken_link() is None

    def assert_valid(self) -> None:
        broken = self.find_broken_link()
        if broken is not None:
            raise ChainIntegrityError(broken)

    def replay_balance(self) -> Decimal:
        """Balance implied by the chain, genesis to latest."""
        if not self._blocks:
            raise EmptyLedgerError("Ledger used before genesis")
        return sum(
            (block.data.signed_amount for block in self._blocks),
            Decimal("0"),
        )
