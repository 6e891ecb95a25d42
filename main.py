# =============================================================================
# main.py  -  Entry Point for the Kriptty MCP Server
# =============================================================================
#
# HOW TO RUN:
#   kriptty-mcp                 (console script installed by pyproject.toml)
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads KRIPTTY_API_URL / KRIPTTY_API_TOKEN from a .env file, if any
#   2. Imports the FastMCP server with every tool registered
#   3. Serves the tools over stdio until the agent disconnects
#
# The API client is not built here.  It is created on the first tool call,
# so a missing variable shows up as a ConfigError on that call rather than
# stopping the server before the agent can even list the tools.
# =============================================================================

from dotenv import load_dotenv

# Must run before the server module reads anything from the environment.
load_dotenv()

from kriptty_mcp.mcp_server import mcp


def main() -> None:
    """Run the tool server over stdio."""
    mcp.run()


# =============================================================================
# Script entry point
# =============================================================================
if __name__ == "__main__":
    main()
