"""
Python client for the Tequilas API: an immutable cart store and an async
HTTP client that submits it.
"""

from tequilas.client.api import ApiError, TequilasClient
from tequilas.client.cart import Cart, CartLine

__all__ = ["ApiError", "Cart", "CartLine", "TequilasClient"]
