"""Adapters for the FreeAgent HTTP API.

Keep these modules small and testable:
- OAuth token handling lives in freeagent_auth
- wire format handling lives in freeagent_codec
- one endpoint class per resource in freeagent_resources
"""
