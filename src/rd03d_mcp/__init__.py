"""Frame decoder and MCP server for the Ai-Thinker RD-03D multi-target radar."""

from .radar import RD03D
from .models import Target, Statistics
