from __future__ import annotations


class OrderKeysError(Exception):
    """Base class for every error raised by this package."""


class InvalidArgument(OrderKeysError, ValueError):
    pass


class InvalidBounds(InvalidArgument):
    """Lower bound not strictly below the upper bound."""


class InvalidOrderKey(InvalidArgument):
    """Digits that cannot form an order key (empty, trailing zero, too long)."""


class NotFound(OrderKeysError, KeyError):
    def __str__(self) -> str:
        # KeyError quotes its argument, keep plain messages
        return str(self.args[0]) if self.args else ""


class EmptyContainer(OrderKeysError, LookupError):
    pass


class PrecisionUnavailable(OrderKeysError, ValueError):
    """No fixed length is known for a key that needs one."""
