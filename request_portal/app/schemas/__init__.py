"""
Pydantic schema definitions.

``master`` describes the typed rows of the master table; ``portal``
describes the JSON payloads exchanged with the browser page.
"""
