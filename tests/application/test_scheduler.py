"""Tests for due-card selection, bucket transitions, card intake and hints."""

import pytest

from kasten.application.buckets import find_bucket, to_bucket_sets
from kasten.application.scheduler import (
    add_card,
    get_hint,
    is_bucket_due,
    next_bucket,
    practice,
    update,
)
from kasten.domain.constants import NO_HINT_MESSAGE, RETIRED_BUCKET
from kasten.domain.exceptions import (
    InvalidBucketError,
    InvalidCardError,
    InvalidDifficultyError,
)
from kasten.domain.models import AnswerDifficulty

WRONG, HARD, EASY = AnswerDifficulty.WRONG, AnswerDifficulty.HARD, AnswerDifficulty.EASY


def _cards_in(buckets, bucket):
    return buckets.get(bucket, set())


def _assert_single_placement(buckets):
    seen = set()
    for cards in buckets.values():
        assert not (seen & cards)
        seen |= cards


class TestPractice:
    @pytest.mark.parametrize(
        "day, tiers",
        [
            (0, [0]),
            (1, [0, 1]),
            (2, [0]),
            (3, [0, 1, 2]),
            (5, [0, 1]),
            (7, [0, 1, 2, 3]),
            (15, [0, 1, 2, 3, 4]),
            (31, [0, 1, 2, 3, 4, 5]),
            (63, [0, 1, 2, 3, 4, 5]),
        ],
    )
    def test_cadence(self, tier_buckets, tier_cards, day, tiers):
        assert practice(tier_buckets, day) == {tier_cards[i] for i in tiers}

    def test_empty_sequence(self):
        assert practice([], 0) == set()

    def test_short_sequence_contributes_only_existing_tiers(self, card_factory):
        card0, card1 = card_factory("a"), card_factory("b")
        assert practice([{card0}, {card1}], 31) == {card0, card1}

    def test_no_due_bucket_gives_empty_set(self, card_factory):
        # Day 2: only bucket 0 is due, and it is empty
        assert practice([set(), {card_factory("a")}], 2) == set()

    def test_unions_whole_buckets(self, card_factory):
        a, b, c = card_factory("a"), card_factory("b"), card_factory("c")
        assert practice([{a, b}, {c}], 1) == {a, b, c}

    def test_buckets_past_retired_are_never_scheduled(self, card_factory):
        beyond = card_factory("beyond")
        buckets = [set()] * 6 + [{beyond}]
        for day in range(128):
            assert beyond not in practice(buckets, day)

    def test_does_not_mutate_input(self, tier_buckets):
        snapshot = [set(s) for s in tier_buckets]
        practice(tier_buckets, 31)
        assert tier_buckets == snapshot

    @pytest.mark.parametrize("day", [-1, 1.5, "3", True])
    def test_rejects_bad_day(self, tier_buckets, day):
        with pytest.raises(InvalidBucketError):
            practice(tier_buckets, day)

    def test_rejects_list_in_place_of_set(self, card_factory):
        with pytest.raises(InvalidBucketError):
            practice([[card_factory("a")]], 0)

    def test_rejects_sparse_mapping(self, card_factory):
        with pytest.raises(InvalidBucketError):
            practice({0: {card_factory("a")}}, 0)

    def test_rejects_non_card_members(self):
        with pytest.raises(InvalidCardError):
            practice([{"not a card"}], 0)

    def test_is_bucket_due(self):
        assert is_bucket_due(0, 0)
        assert is_bucket_due(3, 7)
        assert not is_bucket_due(3, 8)


class TestUpdate:
    def test_monotonic_transitions(self, card_factory):
        card = card_factory("walker")
        buckets = {2: {card}}

        buckets = update(buckets, card, EASY)
        assert find_bucket(buckets, card) == 3

        buckets = update(buckets, card, HARD)
        assert find_bucket(buckets, card) == 2

        buckets = update(buckets, card, WRONG)
        assert find_bucket(buckets, card) == 0

        buckets = update(buckets, card, HARD)
        assert find_bucket(buckets, card) == 0

    def test_easy_at_retired_bucket_stays(self, card_factory):
        card = card_factory("retired")
        buckets = update({5: {card}}, card, EASY)
        assert find_bucket(buckets, card) == RETIRED_BUCKET

    def test_promotion_never_exceeds_scheduling_window(self, card_factory):
        # The selector only looks at buckets 0..5; promotion must stop there too
        card = card_factory("climber")
        buckets = {0: {card}}
        for _ in range(10):
            buckets = update(buckets, card, EASY)

        assert find_bucket(buckets, card) == RETIRED_BUCKET
        assert card in practice(to_bucket_sets(buckets), 31)

    def test_wrong_creates_bucket_zero(self, card_factory):
        card = card_factory("a")
        buckets = update({3: {card}}, card, WRONG)
        assert _cards_in(buckets, 0) == {card}
        assert buckets[3] == set()

    def test_easy_creates_missing_destination(self, card_factory):
        card = card_factory("a")
        buckets = update({1: {card}}, card, EASY)
        assert buckets[2] == {card}

    def test_original_mapping_untouched(self, card_factory):
        card, other = card_factory("a"), card_factory("b")
        original = {1: {card, other}}

        update(original, card, EASY)

        assert original == {1: {card, other}}

    @pytest.mark.parametrize("difficulty", list(AnswerDifficulty))
    def test_absent_card_is_noop_copy(self, card_factory, difficulty):
        card, stray = card_factory("a"), card_factory("stray")
        original = {0: {card}, 4: set()}

        result = update(original, stray, difficulty)

        assert result == original
        assert result is not original
        assert result[0] is not original[0]

    def test_lookalike_card_is_not_moved(self, card_factory):
        card = card_factory("same")
        lookalike = card_factory("same")

        result = update({2: {card}}, lookalike, EASY)

        assert result == {2: {card}}

    @pytest.mark.parametrize("difficulty", list(AnswerDifficulty))
    def test_card_stays_in_one_bucket(self, card_factory, difficulty):
        cards = [card_factory(str(i)) for i in range(6)]
        buckets = {i: {c} for i, c in enumerate(cards)}

        for card in cards:
            buckets = update(buckets, card, difficulty)
            _assert_single_placement(buckets)

        assert sum(len(s) for s in buckets.values()) == len(cards)

    @pytest.mark.parametrize("difficulty", ["easy", 2, None])
    def test_rejects_non_enum_difficulty(self, card_factory, difficulty):
        card = card_factory("a")
        with pytest.raises(InvalidDifficultyError):
            update({0: {card}}, card, difficulty)

    def test_rejects_non_card(self, card_factory):
        with pytest.raises(InvalidCardError):
            update({0: {card_factory("a")}}, "a", EASY)


class TestNextBucket:
    @pytest.mark.parametrize(
        "bucket, difficulty, expected",
        [
            (0, WRONG, 0),
            (4, WRONG, 0),
            (0, HARD, 0),
            (3, HARD, 2),
            (0, EASY, 1),
            (4, EASY, 5),
            (5, EASY, 5),
        ],
    )
    def test_transition_table(self, bucket, difficulty, expected):
        assert next_bucket(bucket, difficulty) == expected


class TestAddCard:
    def test_new_card_lands_in_learning_bucket(self, card_factory):
        card = card_factory("new")
        result = add_card({}, card)
        assert result == {0: {card}}

    def test_existing_card_is_left_in_place(self, card_factory):
        card = card_factory("known")
        original = {3: {card}}

        result = add_card(original, card)

        assert result == {3: {card}}
        assert result is not original

    def test_does_not_mutate_input(self, card_factory):
        first, second = card_factory("first"), card_factory("second")
        original = {0: {first}}

        add_card(original, second)

        assert original == {0: {first}}


class TestGetHint:
    def test_returns_hint(self, card_factory):
        assert get_hint(card_factory("a", hint="think of Paris")) == "think of Paris"

    def test_empty_hint(self, card_factory):
        assert get_hint(card_factory("a", hint="")) == NO_HINT_MESSAGE

    def test_rejects_non_card(self):
        with pytest.raises(InvalidCardError, match="Invalid flashcard"):
            get_hint({"front": "a"})
