"""Amber installer (AmberTools / PMEMD from the vendor source archives).

Core design goals:
- One immutable build configuration per invocation
- Fail fast: the first failing step aborts the run
- Re-runnable: existing environments and source trees are reused
- Releases described as data (YAML manifests)
- Centralized logging
"""

__all__ = []
