#!/usr/bin/env python3
"""
Smoke test: start the server over stdio and list its tools
"""

import asyncio
import os
import sys
from pathlib import Path

from fastmcp import Client
from fastmcp.client.transports import PythonStdioTransport

SERVER_PATH = Path(__file__).parent / "server.py"


async def check_server() -> bool:
    """Check that the server starts and registers its tools"""
    print("Testing fal-ai/minimax/image-01 MCP Server...\n")

    if not os.getenv("FAL_KEY"):
        print("❌ FAL_KEY environment variable is not set")
        print("Please set your fal.ai API key: export FAL_KEY=your_api_key_here")
        return False
    print("✅ FAL_KEY environment variable is set")

    print("🚀 Starting MCP server...")
    try:
        transport = PythonStdioTransport(
            script_path=str(SERVER_PATH),
            env=dict(os.environ),
        )
        async with Client(transport) as client:
            tools = await client.list_tools()
    except Exception as e:
        print(f"❌ Server failed to start: {e}")
        return False

    print("✅ Server is running")
    print("📋 Available tools:")
    for tool in tools:
        print(f"  - {tool.name}: {tool.description}")

    print("\n🎯 Example usage in MCP client:")
    print("  Tool: minimax_generate")
    print('  Parameters: {"prompt": "A futuristic cityscape with flying cars and neon lights", '
          '"aspect_ratio": "16:9", "num_images": 1, "prompt_optimizer": true}')
    return True


if __name__ == "__main__":
    success = asyncio.run(check_server())
    sys.exit(0 if success else 1)
