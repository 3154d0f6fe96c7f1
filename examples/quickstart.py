#!/usr/bin/env python3
# examples/quickstart.py
"""
Quickstart: a tool page in a few lines

Opens a Base64 tool page, types into it, and shows the shareable query
string and the history that builds up behind it.

Run with: python examples/quickstart.py
Set TOOL_STATE_DB_PATH to keep history between runs.
"""

import asyncio

from dotenv import load_dotenv

from tool_state_sync import FieldRole, FieldSpec, FieldType, InputSideConfig, ToolSchema, ToolStateManager

load_dotenv()

BASE64 = ToolSchema(
    tool_id="base64",
    fields=[
        FieldSpec(name="leftText", role=FieldRole.INPUT),
        FieldSpec(name="rightText", role=FieldRole.INPUT),
        FieldSpec(name="padding", type=FieldType.BOOLEAN, default=True),
        FieldSpec(name="urlSafe", type=FieldType.BOOLEAN),
        FieldSpec(name="activeSide", type=FieldType.ENUM, choices=("left", "right")),
    ],
    input_side=InputSideConfig(
        side_key="activeSide",
        input_key_by_side={"left": "leftText", "right": "rightText"},
    ),
)


async def main():
    print("🚀 Tool State Quickstart")
    print("=" * 40)

    async with ToolStateManager(BASE64, debounce_ms=200, on_mirror_change=lambda q: print(f"🔗 ?{q}")) as manager:
        sync = await manager.open()
        print(f"📥 Hydrated from: {sync.hydration_source.value}")

        # Typing: the address bar follows every keystroke, history waits for a pause
        for text in ("h", "he", "hello"):
            await sync.set_field("leftText", text)
        await sync.set_field("urlSafe", True)
        await asyncio.sleep(0.3)

        # Something too big to share in the address bar
        await sync.set_field("leftText", "x" * 4000)
        print(f"📦 Kept out of the URL: {sorted(sync.get_oversize_keys())}")
        await sync.flush()

        print(f"\n📚 History for {manager.tool_id}:")
        for entry in manager.history.entries:
            print(f"   • {entry.preview[:40]!r} params={entry.params}")

        print(f"🕘 Recent tools: {manager.recent_tools.recent_tools}")


if __name__ == "__main__":
    asyncio.run(main())
