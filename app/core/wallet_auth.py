"""
Ethereum Wallet Authentication Utilities

This module handles the wallet-specific cryptographic operations for authentication.
Signatures follow the EIP-191 personal_sign convention (what MetaMask's
`personal_sign` / ethers' `signer.signMessage` produce): the message is prefixed with
"\\x19Ethereum Signed Message:\\n<len>", keccak-hashed, and the signer is recovered
from the (r, s, v) signature.

Authentication Flow:
1. Backend generates a random nonce -> generate_nonce()
2. Backend builds the challenge text -> build_auth_message()
3. Frontend signs the challenge with the wallet (personal_sign)
4. Frontend sends: walletAddress, nonce, signature
5. Backend rebuilds the same challenge and checks it: verify_signature()
   - Recovers the signing address from (message, signature)
   - Compares it case-insensitively with the claimed address

The signature recovery uses the eth_account library.
"""

import uuid
from datetime import datetime, timezone

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_hex_address


AUTH_MESSAGE_PREFIX = "Sign this message to authenticate with your wallet:"


def generate_nonce() -> str:
    """
    Generate a globally unique random nonce for wallet authentication.

    Returns:
        UUID4 string (e.g., "3f2b6c1e-...")
    """
    return str(uuid.uuid4())


def normalize_address(address: str) -> str:
    """Canonical form of an account address: trimmed and lower-cased."""
    return (address or "").strip().lower()


def is_valid_address(address: str) -> bool:
    """True for a 0x-prefixed, 20-byte hex account address (any letter case)."""
    if not address:
        return False
    address = address.strip()
    return address.startswith("0x") and is_hex_address(address)


def format_timestamp(epoch_seconds: int) -> str:
    """Render epoch seconds as a UTC ISO-8601 string, e.g. 2024-01-01T12:00:00Z."""
    return datetime.fromtimestamp(int(epoch_seconds), tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_auth_message(nonce: str, issued_at: int) -> str:
    """
    Build the challenge text the wallet signs.

    The result depends only on (nonce, issued_at), so the verifier can rebuild it
    byte for byte from the persisted nonce record.

    Args:
        nonce: The nonce handed out by /auth/nonce
        issued_at: Nonce creation time in epoch seconds (as persisted)

    Returns:
        Human-readable multi-line message
    """
    return f"{AUTH_MESSAGE_PREFIX}\n\nNonce: {nonce}\nTimestamp: {format_timestamp(issued_at)}"


def recover_address(message: str, signature: str) -> str:
    """Recover the checksummed signer address of a personal_sign signature."""
    signable = encode_defunct(text=message)
    return Account.recover_message(signable, signature=signature.strip())


def verify_signature(message: str, signature: str, claimed_address: str) -> bool:
    """
    Verify that `signature` over `message` was produced by `claimed_address`.

    This is the check performed by /auth/verify. All failure modes (malformed hex,
    wrong signature length, invalid recovery id, recovery error, address mismatch)
    collapse to False.

    Example:
        if verify_signature(build_auth_message(nonce, created_at), sig, "0xabc..."):
            # issue a session token
    """
    if not message or not signature or not claimed_address:
        return False
    try:
        recovered = recover_address(message, signature)
    except Exception:
        return False
    return normalize_address(recovered) == normalize_address(claimed_address)
