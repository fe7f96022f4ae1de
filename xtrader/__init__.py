"""In-memory order matching engine with price-time priority, its order books and a scenario command."""

__version__ = "0.1.0"

__all__ = ["__version__"]