from __future__ import annotations

import functools
import itertools
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import SUITS, Card

RANK_NAMES = {
    2: "two",
    3: "three",
    4: "four",
    5: "five",
    6: "six",
    7: "seven",
    8: "eight",
    9: "nine",
    10: "ten",
    11: "jack",
    12: "queen",
    13: "king",
    14: "ace",
}


class HandCategory(IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.lower()


@functools.total_ordering
@dataclass(frozen=True)
class HandResult:
    category: HandCategory
    tiebreak: Tuple[int, ...]
    best_five: Tuple[Card, ...]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandResult):
            return NotImplemented
        return compare(self, other) == 0

    def __lt__(self, other: "HandResult") -> bool:
        return compare(self, other) < 0

    def __hash__(self) -> int:
        return hash((self.category, self.tiebreak))


def evaluate(cards: Sequence[Card]) -> HandResult:
    """Rank the best five-card hand that can be made from 5 or more cards.

    Categories are checked from royal flush down to high card and the first
    match wins. ``tiebreak`` holds the numeric ranks used to compare two hands
    of the same category, ``best_five`` the physical cards realizing the hand.
    """
    if len(cards) < 5:
        raise ValueError("At least five cards are required")

    ordered = sorted(cards, key=_card_order)
    counts = Counter(card.value for card in ordered)
    by_count: Dict[int, List[int]] = {}
    for value, count in counts.items():
        by_count.setdefault(count, []).append(value)
    for values in by_count.values():
        values.sort(reverse=True)

    flush = _flush_cards(ordered)
    if flush:
        top = _straight_high({card.value for card in flush})
        if top is not None:
            category = HandCategory.ROYAL_FLUSH if top == 14 else HandCategory.STRAIGHT_FLUSH
            return HandResult(category, (top,), _straight_cards(flush, top))

    quads = by_count.get(4, [])
    if quads:
        quad = quads[0]
        kicker = next(card for card in ordered if card.value != quad)
        best = _take(ordered, quad, 4) + [kicker]
        return HandResult(HandCategory.FOUR_OF_A_KIND, (quad, kicker.value), tuple(best))

    trips = by_count.get(3, [])
    pairs = by_count.get(2, [])
    if trips and (len(trips) >= 2 or pairs):
        # A second set of trips donates a pair; the higher candidate wins.
        pair = max(trips[1:] + pairs)
        best = _take(ordered, trips[0], 3) + _take(ordered, pair, 2)
        return HandResult(HandCategory.FULL_HOUSE, (trips[0], pair), tuple(best))

    if flush:
        top_five = flush[:5]
        return HandResult(HandCategory.FLUSH, tuple(card.value for card in top_five), tuple(top_five))

    top = _straight_high(set(counts))
    if top is not None:
        return HandResult(HandCategory.STRAIGHT, (top,), _straight_cards(ordered, top))

    if trips:
        kickers = [card for card in ordered if card.value != trips[0]][:2]
        best = _take(ordered, trips[0], 3) + kickers
        return HandResult(
            HandCategory.THREE_OF_A_KIND,
            (trips[0],) + tuple(card.value for card in kickers),
            tuple(best),
        )

    if len(pairs) >= 2:
        high, low = pairs[0], pairs[1]
        kicker = next(card for card in ordered if card.value not in (high, low))
        best = _take(ordered, high, 2) + _take(ordered, low, 2) + [kicker]
        return HandResult(HandCategory.TWO_PAIR, (high, low, kicker.value), tuple(best))

    if pairs:
        kickers = [card for card in ordered if card.value != pairs[0]][:3]
        best = _take(ordered, pairs[0], 2) + kickers
        return HandResult(
            HandCategory.PAIR,
            (pairs[0],) + tuple(card.value for card in kickers),
            tuple(best),
        )

    top_five = ordered[:5]
    return HandResult(HandCategory.HIGH_CARD, tuple(card.value for card in top_five), tuple(top_five))


def compare(a: HandResult, b: HandResult) -> int:
    """Negative if ``a`` loses to ``b``, zero on an exact tie, positive if it wins."""
    if a.category != b.category:
        return int(a.category) - int(b.category)
    for left, right in itertools.zip_longest(a.tiebreak, b.tiebreak, fillvalue=0):
        if left != right:
            return left - right
    return 0


def describe_hand(result: HandResult) -> str:
    ranks = result.tiebreak
    category = result.category
    if category == HandCategory.ROYAL_FLUSH:
        return "Royal flush"
    if category == HandCategory.STRAIGHT_FLUSH:
        return f"Straight flush, {_name(ranks[0])} high"
    if category == HandCategory.FOUR_OF_A_KIND:
        return f"Four of a kind, {_plural(ranks[0])}"
    if category == HandCategory.FULL_HOUSE:
        return f"Full house, {_plural(ranks[0])} full of {_plural(ranks[1])}"
    if category == HandCategory.FLUSH:
        return f"Flush, {_name(ranks[0])} high"
    if category == HandCategory.STRAIGHT:
        return f"Straight, {_name(ranks[0])} high"
    if category == HandCategory.THREE_OF_A_KIND:
        return f"Three of a kind, {_plural(ranks[0])}"
    if category == HandCategory.TWO_PAIR:
        return f"Two pair, {_plural(ranks[0])} and {_plural(ranks[1])}"
    if category == HandCategory.PAIR:
        return f"Pair of {_plural(ranks[0])}"
    return f"High card {_name(ranks[0])}"


def _card_order(card: Card) -> Tuple[int, int]:
    return (-card.value, SUITS.index(card.suit))


def _flush_cards(ordered: List[Card]) -> Optional[List[Card]]:
    suited: Dict[str, List[Card]] = {}
    for card in ordered:
        suited.setdefault(card.suit, []).append(card)
    candidates = [group for group in suited.values() if len(group) >= 5]
    if not candidates:
        return None
    return max(candidates, key=lambda group: [card.value for card in group[:5]])


def _straight_high(values: set) -> Optional[int]:
    if 14 in values:  # Ace low
        values = values | {1}
    ordered = sorted(values, reverse=True)
    for idx in range(len(ordered) - 4):
        window = ordered[idx : idx + 5]
        if window[0] - window[4] == 4:
            return window[0]
    return None


def _straight_cards(ordered: List[Card], top: int) -> Tuple[Card, ...]:
    picked = []
    for value in range(top, top - 5, -1):
        wanted = 14 if value == 1 else value
        picked.append(next(card for card in ordered if card.value == wanted))
    return tuple(picked)


def _take(ordered: List[Card], value: int, count: int) -> List[Card]:
    return [card for card in ordered if card.value == value][:count]


def _name(value: int) -> str:
    return RANK_NAMES[value]


def _plural(value: int) -> str:
    return "sixes" if value == 6 else f"{RANK_NAMES[value]}s"
