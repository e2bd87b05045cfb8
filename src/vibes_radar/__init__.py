"""AI Vibes Radar.

Ask several language models how they perceive a brand, merge their answers
into one consensus score, and keep the history for comparisons. Served over
MCP and HTTP.
"""

__version__ = "1.0.0"

SERVICE_NAME = "ai-vibes-radar-mcp"
