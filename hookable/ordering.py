"""Deterministic tap ordering by stage and before constraints."""

from __future__ import annotations

from hookable.models import Tap


def insert_tap(taps: list[Tap], item: Tap) -> int:
    """Insert ``item`` into ``taps`` in place and return its index.

    Walks backward from the end, shifting taps right, until every resolvable
    ``before`` name has been passed and the tap in front has a stage no greater
    than ``item.stage``. ``before`` names not present in ``taps`` are ignored.
    Taps jumped over because of ``before`` are not compared by stage.
    """
    present = {tap.name for tap in taps}
    before = item.before_names() & present
    stage = item.stage

    taps.append(item)
    index = len(taps) - 1
    while index > 0:
        index -= 1
        tap = taps[index]
        taps[index + 1] = tap
        if before:
            if tap.name in before:
                before.discard(tap.name)
                continue
            if before:
                continue
        if tap.stage > stage:
            continue
        index += 1
        break
    taps[index] = item
    return index
