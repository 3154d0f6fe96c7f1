# examples/02_shared_link.py
"""
🔗 SHARED LINKS: hydration precedence

A link wins over history, history wins over defaults, and opening a
shared link records it once.
"""

import asyncio

from tool_state_sync import FieldRole, FieldSpec, FieldType, ToolSchema, ToolStateManager, create_store
from tool_state_sync.url_state import encode_fragment

URL_ESCAPE = ToolSchema(
    tool_id="url-escape",
    fields=[
        FieldSpec(name="text", role=FieldRole.INPUT),
        FieldSpec(name="mode", type=FieldType.ENUM, choices=("encode", "decode")),
        FieldSpec(name="plusForSpace", type=FieldType.BOOLEAN),
    ],
)


async def visit(store, query="", fragment=None):
    async with ToolStateManager(URL_ESCAPE, store=store) as manager:
        sync = await manager.open(query, fragment)
        print(f"   source={sync.hydration_source.value:8} state={sync.values}")
        return manager.history.entries


async def main():
    store = create_store()

    print("1️⃣  First visit, nothing known:")
    await visit(store)

    print("2️⃣  Opening a shared link:")
    await visit(store, "?text=a%20b&mode=decode&utm_source=chat")

    print("3️⃣  Coming back without a link:")
    entries = await visit(store)
    print(f"   {len(entries)} history entry recorded")

    print("4️⃣  Compressed fragment link:")
    state = URL_ESCAPE.bind({"text": "from a fragment", "plusForSpace": True})
    await visit(store, fragment="#" + encode_fragment(URL_ESCAPE, state))

    await store.close()


if __name__ == "__main__":
    asyncio.run(main())
