from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

RANKS = "AKQJT98765432"
SUITS = "hdcs"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS[::-1], start=2)}
SUIT_NAMES = {"h": "hearts", "d": "diamonds", "c": "clubs", "s": "spades"}
DECK_SIZE = len(RANKS) * len(SUITS)


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def suit_name(self) -> str:
        return SUIT_NAMES[self.suit]

    def __str__(self) -> str:
        return self.label


def build_deck(seed: Optional[int] = None) -> List[Card]:
    rng = random.Random(seed)
    deck = [Card(rank, suit) for rank in RANKS[::-1] for suit in SUITS]
    rng.shuffle(deck)
    return deck


class Deck:
    """Ordered stack of distinct cards; the top of the deck is index 0."""

    def __init__(self, cards: Iterable[Card]) -> None:
        self._cards = list(cards)
        if len(self._cards) > DECK_SIZE:
            raise ValueError("Deck cannot hold more than 52 cards")
        if len(set(self._cards)) != len(self._cards):
            raise ValueError("Deck contains duplicate cards")

    @classmethod
    def shuffled(cls, seed: Optional[int] = None) -> "Deck":
        return cls(build_deck(seed))

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> Sequence[Card]:
        return tuple(self._cards)

    def draw(self, count: int = 1) -> List[Card]:
        if len(self._cards) < count:
            raise RuntimeError("Not enough cards left in deck")
        cards = self._cards[:count]
        del self._cards[:count]
        return cards

    def burn(self) -> Card:
        return self.draw(1)[0]


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    text = label.strip()
    if text[:2] == "10":
        text = "T" + text[2:]
    if len(text) != 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(text[0].upper(), text[1].lower())


def parse_cards(labels: Iterable[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
