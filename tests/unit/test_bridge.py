"""Unit tests for messaging endpoints and bridge legs."""

import pytest

from src.bridge import (
    BridgeReceiver,
    BridgeSender,
    FeePaymaster,
    Mailbox,
    compute_message_id,
    decode_transfer,
    encode_transfer,
)
from src.chain import ZERO_ADDRESS, make_address
from src.core.errors import (
    AuthorizationError,
    ConfigurationError,
    InsufficientFeeError,
    LendingError,
    SameDomainError,
    ValidationError,
)

UNIT = 10**18
ALICE = make_address("alice")
STRANGER = make_address("stranger")

# default gas price * (gas limit + 16 gas per byte * 64 byte payload)
TRANSFER_FEE = 10**9 * (200_000 + 16 * 64)


class TestCodec:
    """Tests for payload and message id encoding."""

    def test_transfer_payload(self):
        """Test the payload is a 64-byte (address, uint256) tuple."""
        body = encode_transfer(ALICE, 123)
        assert len(body) == 64
        assert decode_transfer(body) == (ALICE, 123)

    def test_malformed_payload(self):
        """Test a truncated payload raises a protocol error."""
        with pytest.raises(ValidationError):
            decode_transfer(b"\x01\x02\x03")

    def test_message_id_depends_on_nonce(self):
        """Test identical payloads get distinct ids per nonce."""
        body = encode_transfer(ALICE, 1)
        first = compute_message_id(0, 1, ALICE, 2, ALICE, body)
        second = compute_message_id(1, 1, ALICE, 2, ALICE, body)

        assert first != second
        assert first.startswith("0x") and len(first) == 66


class TestFeePaymaster:
    """Tests for FeePaymaster."""

    def test_quote(self, origin, destination):
        """Test fee = gas price * (gas limit + per-byte gas * size)."""
        origin.paymaster.set_gas_price(origin.owner, destination.domain_id)
        assert origin.paymaster.quote_fee(destination.domain_id, 64) == TRANSFER_FEE

    def test_gas_price_override(self, origin, destination):
        origin.paymaster.set_gas_price(origin.owner, destination.domain_id, gas_price=2)
        assert origin.paymaster.quote_fee(destination.domain_id, 0) == 400_000

    def test_unknown_destination(self, origin):
        """Test quoting a destination that was never enabled fails."""
        with pytest.raises(ConfigurationError):
            origin.paymaster.quote_fee(12345, 64)

    def test_owner_only(self, origin, destination):
        with pytest.raises(AuthorizationError):
            origin.paymaster.set_gas_price(STRANGER, destination.domain_id)

    def test_claim(self, origin, destination):
        """Test the owner can claim collected fees."""
        origin.paymaster.set_gas_price(origin.owner, destination.domain_id)
        origin.domain.fund(ALICE, TRANSFER_FEE)
        origin.paymaster.pay_for_message(ALICE, "0x01", destination.domain_id, 64, TRANSFER_FEE)

        assert origin.paymaster.payments["0x01"] == TRANSFER_FEE
        assert origin.paymaster.claim(origin.owner) == TRANSFER_FEE
        assert origin.domain.native.balance_of(origin.owner) == TRANSFER_FEE


class TestMailbox:
    """Tests for Mailbox dispatch and processing."""

    @pytest.fixture
    def enabled(self, origin, destination):
        origin.paymaster.set_gas_price(origin.owner, destination.domain_id)
        origin.domain.fund(ALICE, UNIT)
        return origin.mailbox

    def test_requires_paymaster(self, origin):
        with pytest.raises(ConfigurationError):
            Mailbox(origin.domain, None)

    def test_dispatch(self, origin, destination, enabled):
        """Test dispatch records the message and refunds excess value."""
        body = encode_transfer(ALICE, 1)
        message_id = enabled.dispatch(ALICE, destination.domain_id, ALICE, body, value=UNIT)

        [message] = enabled.outbox
        assert message.message_id == message_id
        assert message.destination_domain == destination.domain_id
        assert message.origin_domain == origin.domain_id
        assert enabled.nonce == 1
        assert origin.domain.native.balance_of(ALICE) == UNIT - TRANSFER_FEE

    def test_quote_dispatch(self, destination, enabled):
        assert enabled.quote_dispatch(destination.domain_id, encode_transfer(ALICE, 1)) == TRANSFER_FEE

    def test_dispatch_to_self(self, origin, enabled):
        """Test a mailbox cannot message its own domain."""
        with pytest.raises(SameDomainError):
            enabled.dispatch(ALICE, origin.domain_id, ALICE, b"", value=UNIT)

    def test_underpaid_dispatch_reverts(self, destination, enabled):
        """Test an underpaid dispatch leaves no message behind."""
        with pytest.raises(InsufficientFeeError):
            enabled.dispatch(ALICE, destination.domain_id, ALICE, encode_transfer(ALICE, 1), value=1)
        assert enabled.outbox == []
        assert enabled.nonce == 0

    def test_process_wrong_domain(self, origin, destination, enabled):
        """Test a mailbox refuses messages addressed elsewhere."""
        enabled.dispatch(ALICE, destination.domain_id, ALICE, encode_transfer(ALICE, 1), value=UNIT)
        with pytest.raises(ValidationError):
            origin.mailbox.process(enabled.outbox[0])

    def test_process_unknown_recipient(self, destination, enabled):
        """Test delivery to an address that is not a recipient fails."""
        enabled.dispatch(ALICE, destination.domain_id, ALICE, encode_transfer(ALICE, 1), value=UNIT)
        with pytest.raises(ConfigurationError):
            destination.mailbox.process(enabled.outbox[0])
        assert destination.mailbox.processed == 0


class TestBridgeSender:
    """Tests for BridgeSender configuration and the burn leg."""

    def test_rejects_local_destination(self, origin):
        with pytest.raises(ConfigurationError):
            BridgeSender(origin.domain, origin.mailbox, origin.paymaster, origin.domain_id, ALICE)

    @pytest.mark.parametrize("missing", ["mailbox", "paymaster", "receiver"])
    def test_rejects_missing_collaborator(self, origin, destination, missing):
        """Test every collaborator is required."""
        kwargs = dict(
            mailbox=origin.mailbox,
            paymaster=origin.paymaster,
            destination_domain=destination.domain_id,
            receiver=ALICE,
        )
        kwargs[missing] = ZERO_ADDRESS if missing == "receiver" else None
        with pytest.raises(ConfigurationError):
            BridgeSender(origin.domain, **kwargs)

    def test_quote(self, bridge_sender):
        assert bridge_sender.quote_bridge_fee() == TRANSFER_FEE

    def test_bridge_burns_and_dispatches(self, origin, destination, usdc, bridge_sender):
        """Test bridging burns the amount and dispatches a mint."""
        usdc.mint(origin.owner, ALICE, 10 * UNIT)
        usdc.approve(ALICE, bridge_sender.address, 10 * UNIT)
        origin.domain.fund(ALICE, TRANSFER_FEE)

        message_id = bridge_sender.bridge(ALICE, 10 * UNIT, ALICE, usdc.address, value=TRANSFER_FEE)

        assert usdc.total_supply == 0
        [message] = origin.mailbox.outbox
        assert message.message_id == message_id
        assert message.recipient == destination.receivers["USDC"].address
        assert decode_transfer(message.body) == (ALICE, 10 * UNIT)

    def test_underpaid_bridge_reverts(self, origin, usdc, bridge_sender):
        """Test the burn is undone when the fee is short."""
        usdc.mint(origin.owner, ALICE, 10 * UNIT)
        usdc.approve(ALICE, bridge_sender.address, 10 * UNIT)

        with pytest.raises(InsufficientFeeError):
            bridge_sender.bridge(ALICE, 10 * UNIT, ALICE, usdc.address, value=0)
        assert usdc.balance_of(ALICE) == 10 * UNIT
        assert origin.mailbox.outbox == []


class TestBridgeReceiver:
    """Tests for BridgeReceiver."""

    @pytest.fixture
    def receiver(self, destination, remote_usdc, bridge_sender):
        return destination.receivers["USDC"]

    def test_mailbox_only(self, origin, receiver):
        """Test only the local mailbox can trigger a mint."""
        with pytest.raises(AuthorizationError):
            receiver.handle(STRANGER, origin.domain_id, STRANGER, encode_transfer(STRANGER, UNIT))

    def test_handle_mints(self, origin, destination, remote_usdc, receiver):
        """Test a delivered payload mints to the recipient."""
        receiver.handle(destination.mailbox.address, origin.domain_id, STRANGER, encode_transfer(ALICE, UNIT))
        assert remote_usdc.balance_of(ALICE) == UNIT

    def test_requires_configuration(self, destination, remote_usdc):
        with pytest.raises(ConfigurationError):
            BridgeReceiver(destination.domain, None, remote_usdc.address)
        with pytest.raises(ConfigurationError):
            BridgeReceiver(destination.domain, destination.mailbox.address, None)


class TestInMemoryTransport:
    """Tests for InMemoryTransport bookkeeping."""

    def test_duplicate_mailbox(self, transport, origin):
        """Test one mailbox per domain."""
        with pytest.raises(ConfigurationError):
            transport.connect(origin.mailbox)

    def test_unknown_message(self, transport):
        with pytest.raises(LendingError):
            transport.find("0xdead")

    def test_collect_drains_outbox(self, origin, destination, usdc, remote_usdc, bridge_sender, transport):
        """Test delivered messages leave the origin's journaled state but stay listed."""
        usdc.mint(origin.owner, ALICE, 10 * UNIT)
        usdc.approve(ALICE, bridge_sender.address, 10 * UNIT)
        origin.domain.fund(ALICE, TRANSFER_FEE)
        message_id = bridge_sender.bridge(ALICE, 10 * UNIT, ALICE, usdc.address, value=TRANSFER_FEE)

        assert transport.deliver_all() == 1

        assert origin.mailbox.outbox == []
        assert origin.mailbox.snapshot()["outbox"] == []
        assert [m.message_id for m in transport.dispatched()] == [message_id]
        assert transport.pending() == []
        assert destination.mailbox.processed == 1
        assert remote_usdc.balance_of(ALICE) == 10 * UNIT

    def test_outbox_not_drained_inside_transaction(self, origin):
        with origin.domain.transaction():
            with pytest.raises(ValidationError):
                origin.mailbox.take_outbox()

    def test_malformed_message_stays_pending(self, origin, destination, usdc, remote_usdc, bridge_sender, transport):
        """Test one undecodable message does not stop the rest of the batch."""
        receiver = destination.receivers["USDC"]
        origin.domain.fund(ALICE, UNIT + TRANSFER_FEE)
        bad_id = origin.mailbox.dispatch(ALICE, destination.domain_id, receiver.address, b"\x01\x02\x03", value=UNIT)

        usdc.mint(origin.owner, ALICE, 10 * UNIT)
        usdc.approve(ALICE, bridge_sender.address, 10 * UNIT)
        bridge_sender.bridge(ALICE, 10 * UNIT, ALICE, usdc.address, value=TRANSFER_FEE)

        assert transport.deliver_all() == 1
        assert [m.message_id for m in transport.pending()] == [bad_id]
        assert transport.delivery_count(bad_id) == 0
        assert remote_usdc.balance_of(ALICE) == 10 * UNIT
        assert destination.mailbox.processed == 1
