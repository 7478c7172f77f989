"""Test utilities for uiserve handlers.

Provides an in-process ASGI test client::

    from uiserve.testing import TestClient
"""

from uiserve.testing.client import TestClient

__all__ = ["TestClient"]
