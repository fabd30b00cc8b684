"""
Interfaces - User-facing applications.

- api: FastAPI app (OAuth routes, gated page, gallery JSON)
- cli: Command-line interface
"""

__all__ = ["api", "cli"]
