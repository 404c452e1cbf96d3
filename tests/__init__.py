"""
policygate test suite.

- Gate checks, aggregation and per-user gates
- Policy registry lookup and ancestor fallback
- Policy base class and factory
- Configuration and provider bootstrap
"""
