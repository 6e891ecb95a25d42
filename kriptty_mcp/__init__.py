# =============================================================================
# kriptty_mcp/__init__.py
# =============================================================================
# FastMCP wiring for the kriptty package.
#
# ARCHITECTURAL ROLE:
#   This is the translation layer between the agent runtime and the handler
#   functions in kriptty/.  Each tool here:
#     1. declares its parameters with types and bounds (FastMCP rejects bad
#        input before our code runs, so no request is ever sent for it)
#     2. hands the validated values to one kriptty handler
#     3. returns the handler's text unchanged
#
# WHAT TOOLS DO NOT DO:
#   - They do NOT talk HTTP (that's kriptty/client.py)
#   - They do NOT format output (that's the handler modules)
# =============================================================================
