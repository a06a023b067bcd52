#!/usr/bin/env python3
"""
Log in to the API with a wallet private key and print the session token.

Performs the same steps as the browser client: request a nonce, personal_sign the
returned message, exchange the signature for a session token. With --contracts the
wallet's saved contracts are listed using that token.

Usage:
    WALLET_PRIVATE_KEY=0x... python scripts/auth_client.py --api http://127.0.0.1:8000
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Tuple

from eth_account import Account
from eth_account.messages import encode_defunct


def http_json(
    method: str,
    url: str,
    payload: Dict[str, Any] | None = None,
    *,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 10,
) -> Tuple[int, Any]:
    data = None
    merged = {"Content-Type": "application/json"}
    if headers:
        merged.update(headers)
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
    req = urllib.request.Request(url, data=data, headers=merged, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8")
            return resp.status, json.loads(raw) if raw else None
    except urllib.error.HTTPError as e:
        raw = e.read().decode("utf-8")
        try:
            return e.code, json.loads(raw)
        except ValueError:
            return e.code, raw or e.reason


def login_with_private_key(api_base: str, private_key: str, *, timeout: int = 10) -> Tuple[str, str, int]:
    """
    Nonce + personal_sign login via /auth/nonce and /auth/verify.
    Returns (wallet_address, session_token, expires_in_seconds).
    """
    api_base = api_base.rstrip("/")
    acct = Account.from_key(private_key.strip())
    address = acct.address

    st, challenge = http_json("POST", f"{api_base}/auth/nonce", {"walletAddress": address}, timeout=timeout)
    if st != 200 or not isinstance(challenge, dict):
        raise RuntimeError(f"nonce request failed: {st} {challenge}")

    signed = acct.sign_message(encode_defunct(text=challenge["message"]))
    signature = "0x" + bytes(signed.signature).hex()

    st, grant = http_json(
        "POST",
        f"{api_base}/auth/verify",
        {"walletAddress": address, "signature": signature, "nonce": challenge["nonce"]},
        timeout=timeout,
    )
    if st != 200 or not isinstance(grant, dict):
        raise RuntimeError(f"verify failed: {st} {grant}")
    return grant["walletAddress"], grant["sessionToken"], int(grant["expiresInSeconds"])


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--api", default=os.getenv("API_BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--contracts", action="store_true", help="list saved contracts after login")
    args = parser.parse_args(argv)

    private_key = os.getenv("WALLET_PRIVATE_KEY", "")
    if not private_key:
        print("WALLET_PRIVATE_KEY is not set", file=sys.stderr)
        return 2

    try:
        address, token, expires_in = login_with_private_key(args.api, private_key)
    except (RuntimeError, urllib.error.URLError) as e:
        print(str(e), file=sys.stderr)
        return 1

    print(json.dumps({"walletAddress": address, "sessionToken": token, "expiresInSeconds": expires_in}, indent=2))

    if args.contracts:
        st, body = http_json("GET", f"{args.api.rstrip('/')}/contracts", headers={"Authorization": f"Bearer {token}"})
        print(json.dumps(body, indent=2, default=str))
        if st != 200:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
