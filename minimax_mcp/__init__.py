"""
fal.ai MiniMax image-01 MCP server components
"""

__version__ = "1.0.0"

MODEL_ID = "fal-ai/minimax/image-01"
SERVER_NAME = "fal-minimax-server"
