"""Generation of order keys between two bounds.

Keys are walked as a base-256 digit tree. At each level the digits strictly
above the lower bound's digit give "direct" keys one digit longer than the
prefix, and when those are too few the remaining keys go one level deeper,
spread over the usable digits in proportion to the room each one leaves.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from .errors import InvalidArgument, InvalidBounds
from .keys import MAX_DIGIT, TOP_VALUE, OrderKey, common_prefix

logger = logging.getLogger(__name__)


def simple_distribute(k: int, mn: int, mx: int) -> List[int]:
    """Pick ``k`` evenly spread values out of ``[mn, mx]``, in ascending order.

    The upper side gets the smaller share so that more room stays free below,
    appending after the last element being more common than prepending.
    """
    n = mx - mn + 1
    if k <= 0:
        return []
    if k > n:
        raise InvalidArgument(f"cannot pick {k} values out of {n}")
    if k == n:
        return list(range(mn, mx + 1))
    if k == 1:
        return [mn + n // 2]
    if k == 2:
        # the midpoint split would leave one third on one side and two on the other
        return [mn + (n - 1) // 3, mn + (2 * n - 1) // 3]
    pivot = mn + n // 2
    right = (k - 1) // 2
    return (
        simple_distribute(k - 1 - right, mn, pivot - 1)
        + [pivot]
        + simple_distribute(right, pivot + 1, mx)
    )


def weighted_distribute(
    total: int,
    mn: int,
    mx: int,
    weights: Optional[Dict[int, int]] = None,
) -> Dict[int, int]:
    """Split ``total`` among the digits of ``[mn, mx]`` proportionally to their weight.

    Digits missing from ``weights`` weigh ``TOP_VALUE``. Truncation leftovers go
    one per digit, placed by :func:`simple_distribute`.
    """
    if mn == mx:
        return {mn: total}
    weights = weights or {}
    ponderation = {d: max(weights.get(d, TOP_VALUE), 1) for d in range(mn, mx + 1)}
    wsum = sum(ponderation.values())
    counts = {d: total * w // wsum for d, w in ponderation.items()}
    leftover = total - sum(counts.values())
    for d in simple_distribute(leftover, mn, mx):
        counts[d] += 1
    return counts


def _generate_codes(count: int, lower: bytes, upper: Optional[bytes], prefix: bytes) -> List[bytes]:
    if count == 0:
        return []

    if upper is not None:
        shared = common_prefix(lower, upper)
        if shared:
            prefix += shared
            lower = lower[len(shared):]
            upper = upper[len(shared):]

    start_digit = lower[0] if lower else 0
    end_digit = upper[0] if upper else MAX_DIGIT

    # an upper bound ending right here is itself prefix + end_digit:
    # end_digit can neither be a direct key nor prefix longer ones
    closed_end = upper is not None and len(upper) == 1
    direct_max = end_digit - 1 if closed_end else end_digit
    n_direct_candidates = direct_max - start_digit

    longer: Dict[int, int] = {}
    if n_direct_candidates >= count:
        direct = set(simple_distribute(count, start_digit + 1, direct_max))
    else:
        direct = set(range(start_digit + 1, direct_max + 1))
        weights = {}
        if len(lower) > 1:
            weights[start_digit] = TOP_VALUE - lower[1]
        if upper is not None and len(upper) > 1:
            weights[end_digit] = upper[1]
        longer = weighted_distribute(count - n_direct_candidates, start_digit, direct_max, weights)

    codes: List[bytes] = []
    for digit in sorted(direct.union(d for d, n in longer.items() if n)):
        pre = prefix + bytes((digit,))
        if digit in direct:
            codes.append(pre)
        n_longer = longer.get(digit, 0)
        if n_longer:
            codes.extend(
                _generate_codes(
                    n_longer,
                    lower[1:] if digit == start_digit else b"",
                    upper[1:] if upper is not None and digit == end_digit else None,
                    pre,
                )
            )
    return codes


def generate(
    count: int,
    lower: Optional[OrderKey] = None,
    upper: Optional[OrderKey] = None,
) -> List[OrderKey]:
    """Return ``count`` ascending keys strictly between ``lower`` and ``upper``.

    Either bound may be omitted for an open end. The keys are as short as
    possible, then as evenly spread as possible.
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidArgument(f"count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidArgument(f"count must not be negative, got {count}")
    if lower is not None and upper is not None and not lower < upper:
        raise InvalidBounds(f"lower bound {lower!r} is not below upper bound {upper!r}")

    codes = _generate_codes(
        count,
        lower.code if lower is not None else b"",
        upper.code if upper is not None else None,
        b"",
    )
    logger.debug("generated %d keys between %r and %r", len(codes), lower, upper)
    return [OrderKey(code) for code in codes]


def initial(n: int = 1) -> List[OrderKey]:
    return generate(n)


def between(start: OrderKey, end: OrderKey, n: int = 1) -> List[OrderKey]:
    return generate(n, start, end)


def before(key: OrderKey, n: int = 1) -> List[OrderKey]:
    return generate(n, None, key)


def after(key: OrderKey, n: int = 1) -> List[OrderKey]:
    return generate(n, key, None)
