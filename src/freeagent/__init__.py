"""Typed client for the FreeAgent accounting API.

Layout
- models: pydantic records for each API resource
- integrations: OAuth, HTTP client, wire codec, resource endpoints
- use_cases: business rules checked before a request is sent
"""
