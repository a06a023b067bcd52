import pytest

from app.core.wallet_auth import (
    build_auth_message,
    format_timestamp,
    generate_nonce,
    is_valid_address,
    normalize_address,
    verify_signature,
)


def _flip_bit(signature: str, byte_index: int) -> str:
    raw = bytearray(bytes.fromhex(signature[2:]))
    raw[byte_index] ^= 0x01
    return "0x" + raw.hex()


class TestAuthMessage:
    """Challenge text is deterministic in (nonce, issued_at)"""

    def test_message_embeds_nonce_and_timestamp(self):
        message = build_auth_message("abc-123", 1704110400)
        assert message == (
            "Sign this message to authenticate with your wallet:\n\n"
            "Nonce: abc-123\n"
            "Timestamp: 2024-01-01T12:00:00Z"
        )

    def test_message_is_reproducible(self):
        assert build_auth_message("n", 1700000000) == build_auth_message("n", 1700000000)
        assert build_auth_message("n", 1700000000) != build_auth_message("n", 1700000001)

    def test_format_timestamp_is_utc(self):
        assert format_timestamp(0) == "1970-01-01T00:00:00Z"

    def test_generate_nonce_unique(self):
        nonces = {generate_nonce() for _ in range(100)}
        assert len(nonces) == 100


class TestAddressHelpers:
    def test_normalize_address(self):
        assert normalize_address("  0xABCDEF0123456789abcdef0123456789ABCDEF01 ") == (
            "0xabcdef0123456789abcdef0123456789abcdef01"
        )
        assert normalize_address(None) == ""

    @pytest.mark.parametrize(
        "address",
        [
            "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23",
            "0x2c7536e3605d9c16a7a3d7b1898e529396a65c23",
            "0x2C7536E3605D9C16A7A3D7B1898E529396A65C23",
        ],
    )
    def test_valid_addresses(self, address):
        assert is_valid_address(address)

    @pytest.mark.parametrize(
        "address",
        ["", "0x", "0x123", "2c7536e3605d9c16a7a3d7b1898e529396a65c23", "0xZZ7536e3605d9c16a7a3d7b1898e529396a65c23", None],
    )
    def test_invalid_addresses(self, address):
        assert not is_valid_address(address)


class TestVerifySignature:
    """personal_sign recovery"""

    def test_valid_signature(self, wallet, sign):
        message = build_auth_message("nonce-1", 1704110400)
        assert verify_signature(message, sign(wallet, message), wallet.address)

    def test_address_comparison_is_case_insensitive(self, wallet, sign):
        message = build_auth_message("nonce-1", 1704110400)
        signature = sign(wallet, message)
        assert verify_signature(message, signature, wallet.address.lower())
        assert verify_signature(message, signature, wallet.address.upper().replace("0X", "0x"))

    def test_signature_without_0x_prefix(self, wallet, sign):
        message = "hello"
        assert verify_signature(message, sign(wallet, message)[2:], wallet.address)

    def test_signed_by_other_key(self, wallet, other_wallet, sign):
        message = build_auth_message("nonce-1", 1704110400)
        assert not verify_signature(message, sign(other_wallet, message), wallet.address)

    def test_mutated_message(self, wallet, sign):
        message = build_auth_message("nonce-1", 1704110400)
        signature = sign(wallet, message)
        assert not verify_signature(message + " ", signature, wallet.address)
        assert not verify_signature(build_auth_message("nonce-1", 1704110401), signature, wallet.address)

    @pytest.mark.parametrize("byte_index", [0, 17, 31, 32, 50, 63])
    def test_mutated_signature(self, wallet, sign, byte_index):
        message = build_auth_message("nonce-1", 1704110400)
        signature = _flip_bit(sign(wallet, message), byte_index)
        assert not verify_signature(message, signature, wallet.address)

    @pytest.mark.parametrize(
        "signature",
        ["", "0x", "not-hex", "0x1234", "0x" + "00" * 65, "0x" + "ff" * 66],
    )
    def test_malformed_signature(self, wallet, signature):
        assert not verify_signature("hello", signature, wallet.address)

    def test_missing_inputs(self, wallet, sign):
        signature = sign(wallet, "hello")
        assert not verify_signature("", signature, wallet.address)
        assert not verify_signature("hello", signature, "")
