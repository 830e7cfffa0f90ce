"""Tests for hash linking and the append-only ledger."""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from securefin.exceptions import (
    ChainIntegrityError,
    EmptyLedgerError,
    GenesisExistsError,
)
from securefin.ledger import (
    GENESIS_PREVIOUS_HASH,
    Ledger,
    block_fingerprint,
    fingerprint,
)
from securefin.models.ledger import Category, Transaction, TransactionType

from conftest import FakeClock

FIXED_TS = datetime(2024, 12, 1, 9, 0, tzinfo=timezone.utc)


def make_tx(amount="100", tx_type=TransactionType.INCOME, **kwargs):
    return Transaction(
        id=kwargs.pop("id", "tx-1"),
        timestamp=FIXED_TS,
        type=tx_type,
        category=kwargs.pop("category", Category.SALARY),
        amount=Decimal(amount),
        **kwargs,
    )


class TestFingerprint:

    def test_same_inputs_same_hash(self):
        tx = make_tx()
        first = fingerprint(1, FIXED_TS, tx, GENESIS_PREVIOUS_HASH)
        second = fingerprint(1, FIXED_TS, make_tx(), GENESIS_PREVIOUS_HASH)
        assert first == second
        assert len(first) == 64

    @pytest.mark.parametrize("change", ["index", "timestamp", "amount", "previous_hash"])
    def test_any_field_change_changes_hash(self, change):
        base = dict(
            index=1,
            timestamp=FIXED_TS,
            data=make_tx(),
            previous_hash=GENESIS_PREVIOUS_HASH,
        )
        altered = dict(base)
        if change == "index":
            altered["index"] = 2
        elif change == "timestamp":
            altered["timestamp"] = datetime(2024, 12, 2, tzinfo=timezone.utc)
        elif change == "amount":
            altered["data"] = make_tx(amount="101")
        else:
            altered["previous_hash"] = "f" * 64

        assert fingerprint(**base) != fingerprint(**altered)

    def test_genesis_sentinel(self):
        assert GENESIS_PREVIOUS_HASH == "0" * 64


class TestLedger:

    def test_latest_before_genesis_raises(self):
        with pytest.raises(EmptyLedgerError):
            Ledger().latest()

    def test_append_before_genesis_raises(self):
        with pytest.raises(EmptyLedgerError):
            Ledger().append(make_tx())

    def test_genesis_block(self):
        ledger = Ledger(clock=FakeClock())
        block = ledger.genesis(Decimal("500"))

        assert block.index == 0
        assert block.previous_hash == GENESIS_PREVIOUS_HASH
        assert block.data.description == "Genesis Block"
        assert block.data.amount == Decimal("500")
        assert ledger.latest() == block

    def test_genesis_twice_raises(self):
        ledger = Ledger()
        ledger.genesis()
        with pytest.raises(GenesisExistsError):
            ledger.genesis()

    def test_append_links_to_latest(self):
        ledger = Ledger(clock=FakeClock())
        genesis = ledger.genesis()
        first = ledger.append(make_tx(id="a"))
        second = ledger.append(make_tx(id="b"))

        assert [b.index for b in ledger.blocks] == [0, 1, 2]
        assert first.previous_hash == genesis.hash
        assert second.previous_hash == first.hash
        assert ledger.latest() == second
        assert len(ledger) == 3

    def test_stored_hash_matches_recomputed(self):
        ledger = Ledger()
        ledger.genesis()
        block = ledger.append(make_tx())
        assert block_fingerprint(block) == block.hash

    def test_fresh_chain_verifies(self):
        ledger = Ledger()
        ledger.genesis()
        for i in range(5):
            ledger.append(make_tx(id=f"tx-{i}"))
        assert ledger.verify() is True
        ledger.assert_valid()

    def test_tampered_payload_fails_verification(self):
        ledger = Ledger()
        ledger.genesis()
        ledger.append(make_tx(amount="100"))
        ledger.append(make_tx(amount="200", id="tx-2"))

        original = ledger._blocks[1]
        forged = original.data.model_copy(update={"amount": Decimal("999")})
        ledger._blocks[1] = original.model_copy(update={"data": forged})

        assert ledger.verify() is False
        assert ledger.find_broken_link() == 1
        with pytest.raises(ChainIntegrityError) as exc:
            ledger.assert_valid()
        assert exc.value.broken_index == 1

    def test_rehashed_block_breaks_next_link(self):
        """Recomputing a forged block's hash still breaks its successor."""
        ledger = Ledger()
        ledger.genesis()
        ledger.append(make_tx(amount="100"))
        ledger.append(make_tx(amount="200", id="tx-2"))

        original = ledger._blocks[1]
        forged = original.model_copy(update={
            "data": original.data.model_copy(update={"amount": Decimal("999")}),
        })
        ledger._blocks[1] = forged.model_copy(update={"hash": block_fingerprint(forged)})

        assert ledger.find_broken_link() == 2

    def test_removed_block_detected(self):
        ledger = Ledger()
        ledger.genesis()
        ledger.append(make_tx(id="a"))
        ledger.append(make_tx(id="b"))
        del ledger._blocks[1]

        assert ledger.verify() is False

    def test_transactions_exclude_genesis(self):
        ledger = Ledger()
        ledger.genesis(Decimal("50"))
        ledger.append(make_tx(id="a"))
        assert [t.id for t in ledger.transactions] == ["a"]

    def test_replay_balance(self):
        ledger = Ledger()
        ledger.genesis(Decimal("1000"))
        ledger.append(make_tx(amount="500"))
        ledger.append(make_tx(amount="300", tx_type=TransactionType.EXPENSE, id="e"))
        ledger.append(make_tx(
            amount="200",
            tx_type=TransactionType.TRANSFER,
            receiver="9123456780",
            id="t",
        ))
        assert ledger.replay_balance() == Decimal("1000")

    def test_blocks_snapshot_is_read_only(self):
        ledger = Ledger()
        ledger.genesis()
        blocks = ledger.blocks
        assert isinstance(blocks, tuple)
        ledger.append(make_tx())
        assert len(blocks) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
