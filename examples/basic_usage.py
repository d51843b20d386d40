"""
Basic Streamline client usage example.

This example demonstrates:
- Creating a client from a bootstrap server list
- Connecting and observing connection state
- Sending a control plane request
- Running an operation under the retry policy
"""

import asyncio
import logging

from streamline import StreamlineClient, Request, StreamlineError


async def basic_example():
    """Demonstrate basic client usage"""
    print("Basic Streamline Example")
    print("=" * 30)

    # 1. Create client
    client = StreamlineClient.new("localhost:9092")
    print("✓ Created Streamline client")

    # 2. Watch connection state
    subscription = client.connection_manager.subscribe(
        lambda state: print(f"  connection state: {state.name}")
    )

    try:
        # 3. Connect (probes /health, then checks periodically)
        await client.connect()
        print(f"✓ Connected, healthy: {await client.is_healthy()}")

        # 4. Send a control plane request
        response = await client.send(Request("GET", "/v1/topics"))
        print(f"✓ Listed topics: HTTP {response.status}")

        # 5. Retry an arbitrary operation
        attempts = 0

        async def flaky_operation():
            nonlocal attempts
            attempts += 1
            if attempts < 2:
                raise ConnectionResetError("transient failure")
            return "ok"

        result = await client.execute(flaky_operation)
        print(f"✓ Operation returned {result!r} after {attempts} attempts")

    except StreamlineError as e:
        print(f"✗ {e.message}")
        if e.hint:
            print(f"  hint: {e.hint}")

    finally:
        # 6. Cleanup
        subscription.unsubscribe()
        await client.close()
        print("✓ Client closed")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(basic_example())
