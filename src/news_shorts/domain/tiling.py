"""Choose which pictures fill a slideshow of a given length."""

from typing import List, Sequence

from news_shorts.domain.errors import VisualError, VisualFailure


def units_needed(duration: float, unit: float = 2.0) -> int:
    """Number of ``unit``-second slots needed to cover ``duration``, at least 1.

    Works in whole microseconds so 5.3 s / 2 s is 3 regardless of float noise,
    while any leftover above a full slot (2.0004 s) still needs another one.
    """
    duration_us = int(round(duration * 1_000_000))
    unit_us = int(round(unit * 1_000_000))
    if unit_us <= 0:
        raise ValueError("unit must be positive")
    return max(1, -(-duration_us // unit_us))


def select_images(images: Sequence[str], duration: float, unit: float = 2.0) -> List[str]:
    """Return the ordered pictures for ``duration`` seconds, tiling if short.

    The first ``n`` pictures are used when there are enough of them, otherwise
    the whole sequence is repeated and topped up from its start.
    """
    if not images:
        raise VisualError(VisualFailure.IMAGE, "no pictures to compose")

    need = units_needed(duration, unit)
    if need <= len(images):
        return list(images[:need])

    full_cycles, remainder = divmod(need, len(images))
    selected = list(images) * full_cycles
    selected.extend(images[:remainder])
    return selected
