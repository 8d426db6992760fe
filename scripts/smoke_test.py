#!/usr/bin/env python3
# =============================================================================
# scripts/smoke_test.py - Smoke Test Against a Running Server
# =============================================================================
# Calls every endpoint of a running API and prints the answers.
#
# Usage:
#   uvicorn app.main:app --port 3000 &
#   python scripts/smoke_test.py
#   python scripts/smoke_test.py --base-url http://server:3000 --client-id 12345 --pharmacy "Farmácia X"
#
# The automation call is expected to fail (404) against a test board.
# =============================================================================

import argparse
import json
import os
import sys

from dotenv import load_dotenv
load_dotenv()

import httpx


def show(title: str, response: httpx.Response) -> None:
    print(f"\n{'=' * 60}")
    print(f"{title} -> HTTP {response.status_code}")
    print(f"{'=' * 60}")
    try:
        print(json.dumps(response.json(), indent=2, ensure_ascii=False))
    except ValueError:
        print(response.text[:500])


def run(base_url: str, client_id: int, pharmacy: str) -> int:
    """Hit every endpoint; return a non-zero exit code if the API is down."""
    with httpx.Client(base_url=base_url, timeout=60) as client:
        try:
            show("Health check", client.get("/health"))
        except httpx.TransportError as e:
            print(f"API unreachable at {base_url}: {e}")
            return 1

        show("Monday.com connection", client.get("/test-monday"))
        show("Configuration", client.get("/config"))
        show(f"Product of client {client_id}", client.get(f"/produto/{client_id}"))
        show("BOT pharmacies", client.get("/farmacias", params={"produto": "BOT"}))
        show(
            "Automation",
            client.post("/automatizar", json={"id_cliente": client_id, "nome_farmacia": pharmacy}),
        )
        show(
            "Validation (expected 400)",
            client.post("/automatizar", json={"id_cliente": "invalid", "nome_farmacia": ""}),
        )

    print(f"\nDocs: {base_url}/api-docs")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Smoke test the Monday automation API")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("API_BASE_URL", f"http://localhost:{os.environ.get('API_PORT', '3000')}"),
    )
    parser.add_argument("--client-id", type=int, default=123456)
    parser.add_argument("--pharmacy", default="Farmacia Teste")
    args = parser.parse_args()

    sys.exit(run(args.base_url, args.client_id, args.pharmacy))


if __name__ == "__main__":
    main()
