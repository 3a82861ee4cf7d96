from .city import City

__all__ = [
    "City",
]
