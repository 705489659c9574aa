#!/usr/bin/env python3
"""Demonstration of the paste creation workflow against a running server.

This script shows how to:
1. Request a PoW challenge from the API
2. Solve the challenge by brute force
3. Create a paste with the solution, read it back and delete it

The "ciphertext" here is random bytes; a real client encrypts in the browser
and keeps the key in the URL fragment.

Usage:
    pip install -e ".[demo]"
    python examples/pow_demo.py [BASE_URL]
"""

import base64
import secrets
import sys
import time

import httpx

from delerium_paste.utils.pow_client import find_pow_solution


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def main(base_url: str) -> int:
    with httpx.Client(base_url=base_url, timeout=30.0) as client:
        body: dict[str, object] = {
            "ct": b64url(secrets.token_bytes(64)),
            "iv": b64url(secrets.token_bytes(12)),
            "meta": {"expireTs": int(time.time()) + 3600, "viewsAllowed": 2, "mime": "text/plain"},
        }

        response = client.get("/api/pow")
        if response.status_code == 200:
            challenge = response.json()
            print(f"Challenge: {challenge['challenge']} (difficulty {challenge['difficulty']})")
            started = time.perf_counter()
            nonce, found = find_pow_solution(challenge["challenge"], challenge["difficulty"])
            if not found:
                print("No solution found")
                return 1
            print(f"Solved with nonce {nonce} in {time.perf_counter() - started:.2f}s")
            body["pow"] = {"challenge": challenge["challenge"], "nonce": nonce}
        else:
            print("Proof-of-work disabled on this server")

        created = client.post("/api/pastes", json=body)
        print(f"Create: {created.status_code} {created.json()}")
        if created.status_code != 200:
            return 1
        paste_id = created.json()["id"]
        token = created.json()["deleteToken"]

        fetched = client.get(f"/api/pastes/{paste_id}")
        print(f"Read:   {fetched.status_code} viewsLeft={fetched.json().get('viewsLeft')}")

        deleted = client.delete(f"/api/pastes/{paste_id}", params={"token": token})
        print(f"Delete: {deleted.status_code}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8080"))
