import pytest

from holdem.cards import DECK_SIZE, Card, Deck, build_deck, cards_to_labels, parse_cards, parse_label


def test_card_rejects_unknown_rank_and_suit():
    with pytest.raises(ValueError):
        Card("1", "h")
    with pytest.raises(ValueError):
        Card("A", "x")


def test_card_label_value_and_suit_name():
    card = Card("T", "s")
    assert card.label == "Ts"
    assert str(card) == "Ts"
    assert card.value == 10
    assert card.suit_name == "spades"
    assert Card("A", "h").value == 14
    assert Card("2", "c").value == 2


def test_parse_label_accepts_ten_and_mixed_case():
    assert parse_label("10h") == Card("T", "h")
    assert parse_label("qD") == Card("Q", "d")
    with pytest.raises(ValueError):
        parse_label("Ahh")


def test_build_deck_has_every_card_once():
    deck = build_deck(seed=7)
    assert len(deck) == DECK_SIZE == 52
    assert len(set(deck)) == 52


def test_build_deck_is_deterministic_for_seed():
    assert build_deck(seed=123) == build_deck(seed=123)
    assert build_deck(seed=123) != build_deck(seed=124)


def test_draw_removes_cards_from_top():
    deck = Deck(parse_cards(["Ah", "Kd", "Qc", "Js", "Th"]))
    assert cards_to_labels(deck.draw(2)) == ["Ah", "Kd"]
    assert deck.burn() == Card("Q", "c")
    assert len(deck) == 2
    assert cards_to_labels(deck.cards) == ["Js", "Th"]


def test_drawing_from_exhausted_deck_raises():
    deck = Deck.shuffled(seed=1)
    deck.draw(52)
    with pytest.raises(RuntimeError):
        deck.draw(1)


def test_deck_rejects_duplicates():
    with pytest.raises(ValueError):
        Deck(parse_cards(["Ah", "Ah"]))
