from __future__ import annotations

from typing import Collection, Dict, List, Mapping, Sequence

from .models import Pot


def build_pots(contributions: Mapping[int, int], live: Collection[int]) -> List[Pot]:
    """Layer per-seat hand contributions into a main pot and side pots.

    Each layer is capped at the next smallest contribution level. Folded seats
    leave their chips in every layer they reached but are never eligible.
    Adjacent layers with the same eligible seats are merged, and a layer no
    live seat reached is added to the pot below it.
    """
    remaining: Dict[int, int] = {seat: amount for seat, amount in contributions.items() if amount > 0}
    live_seats = set(live)

    pots: List[Pot] = []
    while remaining:
        level = min(remaining.values())
        amount = 0
        contributors = []
        for seat in sorted(remaining):
            amount += level
            contributors.append(seat)
            remaining[seat] -= level
        remaining = {seat: left for seat, left in remaining.items() if left > 0}

        eligible = {seat for seat in contributors if seat in live_seats}
        if pots and (not eligible or pots[-1].eligible == eligible):
            pots[-1].amount += amount
        else:
            pots.append(Pot(amount=amount, eligible=eligible))

    if len(pots) > 1 and not pots[0].eligible:
        orphan = pots.pop(0)
        pots[0].amount += orphan.amount
    return pots


def split_pot(amount: int, winners: Sequence[int]) -> Dict[int, int]:
    """Split ``amount`` evenly; odd chips go one each to the earliest winners.

    ``winners`` must already be in payout order (left of the button first).
    """
    if not winners:
        raise ValueError("Cannot split a pot with no winners")
    share, remainder = divmod(amount, len(winners))
    return {seat: share + (1 if idx < remainder else 0) for idx, seat in enumerate(winners)}
