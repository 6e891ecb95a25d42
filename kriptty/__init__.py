# =============================================================================
# kriptty/__init__.py
# =============================================================================
# This package holds everything that talks to the Kriptty REST API and turns
# its answers into text an agent can read.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP.  Each handler module is a set of
#   plain async functions: (client, parameters) -> str.  The kriptty_mcp
#   package wires them into tools; tests call them directly.
#
# LAYOUT:
#   config.py      process settings read from the environment
#   client.py      the authenticated request gateway (httpx)
#   models.py      typed shapes of the API's JSON payloads
#   formatting.py  label tables and rendering helpers shared by handlers
#   users.py, routines.py, exchanges.py, bots.py, trades.py
#                  one module per resource family
# =============================================================================
