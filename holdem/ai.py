from __future__ import annotations

import random
from typing import Optional, Sequence

from .cards import RANK_VALUE, parse_cards
from .evaluator import HandCategory, evaluate
from .models import Action, ActionType, ActionWindow, TableSnapshot


def rough_hand_strength(hole: Sequence[str]) -> int:
    """Very rough proxy for pre-flop hand quality used to drive aggression choices."""
    if len(hole) < 2 or "??" in hole:
        return 0

    ranks = [card[0] for card in hole]
    suits = [card[1] for card in hole]
    values = [RANK_VALUE.get(rank, 2) for rank in ranks]

    score = sum(values)
    if ranks[0] == ranks[1]:
        score += 14  # pairs are quite strong pre-flop
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if suits[0] == suits[1]:
        score += 3
    if min(values) >= 11:
        score += 2

    return score


class HousePolicy:
    """Rule-based opponent: hole-card strength pre-flop, the evaluator after the flop."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self.rng = random.Random(seed)

    def __call__(self, window: ActionWindow, view: TableSnapshot) -> Action:
        me = view.player(window.seat)
        category = self._made_hand(me.hole, view.community)

        if window.to_call > 0:
            if category is not None:
                if category >= HandCategory.STRAIGHT:
                    if window.can_raise and self.rng.random() > 0.3:
                        return self._raise(window, window.current_bet + 2 * window.to_call)
                    return self._call(window)
                if category >= HandCategory.PAIR and window.to_call < me.stack / 5 and self.rng.random() > 0.5:
                    return self._call(window)
            elif rough_hand_strength(me.hole) >= 36 and window.can_raise:
                # Always attack with premium holdings.
                return self._raise(window, window.current_bet * 3)
            if window.to_call > me.stack / 3:
                return Action(ActionType.FOLD)
            if self.rng.random() < 0.6:
                return self._call(window)
            return Action(ActionType.FOLD)

        if window.can_raise:
            if category is not None and category >= HandCategory.TWO_PAIR and self.rng.random() > 0.5:
                return self._raise(window, window.current_bet + view.pot_total // 2)
            if self.rng.random() > 0.8:
                return self._raise(window, window.min_raise_to or 0)
        return Action(ActionType.CHECK)

    def _made_hand(self, hole: Sequence[str], community: Sequence[str]) -> Optional[HandCategory]:
        if not community or "??" in hole:
            return None
        return evaluate(parse_cards(list(hole) + list(community))).category

    def _call(self, window: ActionWindow) -> Action:
        if ActionType.CALL in window.legal:
            return Action(ActionType.CALL)
        return Action(ActionType.ALL_IN)

    def _raise(self, window: ActionWindow, target: int) -> Action:
        assert window.min_raise_to is not None and window.max_raise_to is not None
        amount = max(window.min_raise_to, min(target, window.max_raise_to))
        return Action(window.aggressive_action or ActionType.ALL_IN, amount)
