from __future__ import annotations

from typing import Iterable, Iterator, Optional, Union

from .errors import InvalidArgument, InvalidOrderKey, PrecisionUnavailable

MAX_DIGIT = 255
TOP_VALUE = MAX_DIGIT + 1

Digits = Union[bytes, bytearray, memoryview, Iterable[int]]


def _to_bytes(digits: Digits) -> bytes:
    if isinstance(digits, OrderKey):
        return digits.code
    if isinstance(digits, (bytes, bytearray, memoryview)):
        return bytes(digits)
    try:
        return bytes(digits)
    except ValueError as exc:
        raise InvalidOrderKey(f"digits must be in 0..{MAX_DIGIT}") from exc


def common_prefix(a: Digits, b: Digits) -> bytes:
    """Return the longest run of leading digits shared by ``a`` and ``b``.

    Assumes ``a <= b``; the result is then also a prefix of every value
    between them.
    """
    a = _to_bytes(a)
    b = _to_bytes(b)
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return a[:i]
    return a[: min(len(a), len(b))]


class OrderKey:
    """Ordering index of an element relative to other similarly indexed elements.

    The digits sort lexicographically, a prefix sorting before any longer key
    starting with it, which is exactly how ``bytes`` compare. A key is never
    empty and never ends with a zero digit.

    ``max_length`` is only a storage hint: it allows padding the key to a
    fixed-width binary column and concatenating it with another key. It takes
    no part in equality or ordering.
    """

    __slots__ = ("_code", "_max_length")

    def __init__(self, digits: Digits, max_length: Optional[int] = None) -> None:
        code = _to_bytes(digits)
        if not code:
            raise InvalidOrderKey("an order key must not be empty")
        if code[-1] == 0:
            raise InvalidOrderKey("an order key must not end with a zero digit")
        if max_length is not None:
            if max_length < len(code):
                raise InvalidOrderKey(
                    f"key of length {len(code)} exceeds max_length {max_length}"
                )
        self._code = code
        self._max_length = max_length

    @classmethod
    def from_padded(cls, data: Digits, max_length: Optional[int] = None) -> "OrderKey":
        """Rebuild a key read back from a zero-padded fixed-width column."""
        return cls(_to_bytes(data).rstrip(b"\x00"), max_length)

    @property
    def code(self) -> bytes:
        return self._code

    @property
    def max_length(self) -> Optional[int]:
        return self._max_length

    def with_max_length(self, max_length: Optional[int]) -> "OrderKey":
        return OrderKey(self._code, max_length)

    def right_pad(self, target_length: Optional[int] = None) -> bytes:
        """Return the raw digits extended with zeros to exactly ``target_length``.

        The padded form is for storage and display only; comparisons must go
        through the key itself.
        """
        if target_length is None:
            target_length = self._max_length
        if target_length is None:
            raise PrecisionUnavailable(
                "no target length given and the key has no max_length"
            )
        if target_length < len(self._code):
            raise InvalidArgument(
                f"cannot pad a key of length {len(self._code)} to {target_length}"
            )
        return self._code.ljust(target_length, b"\x00")

    def hex(self) -> str:
        return self._code.hex()

    # === composite keys ===

    def __add__(self, other: object) -> "OrderKey":
        if not isinstance(other, OrderKey):
            return NotImplemented
        if self._max_length is None:
            raise PrecisionUnavailable(
                "the left operand of a concatenation needs a max_length"
            )
        max_length = None
        if other._max_length is not None:
            max_length = self._max_length + other._max_length
        return OrderKey(self.right_pad() + other._code, max_length)

    # === value semantics ===

    def __bytes__(self) -> bytes:
        return self._code

    def __len__(self) -> int:
        return len(self._code)

    def __iter__(self) -> Iterator[int]:
        return iter(self._code)

    def __getitem__(self, index):
        return self._code[index]

    def __hash__(self) -> int:
        return hash(self._code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderKey):
            return NotImplemented
        return self._code == other._code

    def __lt__(self, other: "OrderKey") -> bool:
        if not isinstance(other, OrderKey):
            return NotImplemented
        return self._code < other._code

    def __le__(self, other: "OrderKey") -> bool:
        if not isinstance(other, OrderKey):
            return NotImplemented
        return self._code <= other._code

    def __gt__(self, other: "OrderKey") -> bool:
        if not isinstance(other, OrderKey):
            return NotImplemented
        return self._code > other._code

    def __ge__(self, other: "OrderKey") -> bool:
        if not isinstance(other, OrderKey):
            return NotImplemented
        return self._code >= other._code

    def __repr__(self) -> str:
        digits = ", ".join(str(d) for d in self._code)
        if self._max_length is None:
            return f"OrderKey([{digits}])"
        return f"OrderKey([{digits}], max_length={self._max_length})"

    common_prefix = staticmethod(common_prefix)
