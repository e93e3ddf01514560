#!/usr/bin/env python3
"""
KV namespace example.

This example writes, reads, pages through and deletes keys in one
namespace of a deployment.

Usage:
    export PYLON_TOKEN="your-token"
    python examples/kv_basics.py 123456789012345678
"""

import asyncio
import sys

from pylon_client import PylonClient, RemoteError


async def main(deployment_id: str) -> None:
    """Run KV example."""
    async with PylonClient() as client:
        kv = client.kv(deployment_id, "example")

        # Plain JSON values
        await kv.put("prefix", "!")
        await kv.put("counters", {"joins": 3, "leaves": 1})
        print(f"prefix = {await kv.get('prefix')!r}")

        # Only written if the key is absent
        written = await kv.put("prefix", "?", if_not_exists=True)
        print(f"second write applied: {written}")

        # Raw bytes travel base64-encoded
        await kv.put_bytes("avatar", b"\x89PNG\r\n")
        print(f"avatar = {await kv.get_bytes('avatar')!r}")

        # Client-side pagination
        print("first two keys:", await kv.list(limit=2))
        for entry in await kv.items(from_key="prefix"):
            print(f"  {entry.key}: {entry.value!r}")

        # Compare-then-delete (not atomic)
        deleted = await kv.delete("prefix", prev_value="?")
        print(f"deleted on mismatch: {deleted}")

        print(f"{await kv.count()} keys before clear")
        print(f"cleared {await kv.clear()} keys")

        print("namespaces:")
        try:
            for summary in await client.list_namespaces(deployment_id):
                print(f"  {summary.namespace}: {summary.count}")
        except RemoteError as e:
            print(f"  failed: {e}")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        sys.exit("usage: kv_basics.py DEPLOYMENT_ID")
    asyncio.run(main(sys.argv[1]))
