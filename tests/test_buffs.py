"""Tests for the buff catalog and rarity-weighted draws."""

import random
from collections import Counter

import pytest

from engine.buffs import (
    BUFF_DEFINITIONS,
    RARITY_WEIGHTS,
    buff_types_by_rarity,
    create_buff,
    draw_card,
    draw_cards,
    is_rare,
    validate_catalog,
)
from engine.errors import ConfigurationError
from models.buffs import BuffRarity, BuffType


class TestCatalog:
    """Tests for the static catalog tables."""

    def test_every_type_defined(self):
        assert set(BUFF_DEFINITIONS) == set(BuffType)

    def test_every_tier_has_a_buff(self):
        tiers = buff_types_by_rarity()
        for rarity in BuffRarity:
            assert tiers[rarity], rarity

    def test_positive_pool_keeps_every_tier(self):
        tiers = buff_types_by_rarity(only_positive=True)
        for rarity in BuffRarity:
            assert tiers[rarity], rarity
        for types in tiers.values():
            for buff_type in types:
                assert BUFF_DEFINITIONS[buff_type]["is_positive"]

    def test_weights_strictly_decrease(self):
        weights = [RARITY_WEIGHTS[r] for r in BuffRarity]
        assert weights == sorted(weights, reverse=True)
        assert len(set(weights)) == len(weights)

    def test_rarity_rank_order(self):
        assert BuffRarity.COMMON.rank < BuffRarity.RARE.rank
        assert BuffRarity.RARE.rank < BuffRarity.EPIC.rank
        assert BuffRarity.EPIC.rank < BuffRarity.LEGENDARY.rank


class TestValidateCatalog:
    """Tests for validate_catalog()."""

    def test_shipped_catalog_is_valid(self):
        validate_catalog()

    def test_empty_catalog_fails(self):
        with pytest.raises(ConfigurationError, match="empty"):
            validate_catalog(definitions={})

    def test_missing_weight_fails(self):
        weights = dict(RARITY_WEIGHTS)
        del weights[BuffRarity.LEGENDARY]
        with pytest.raises(ConfigurationError, match="positive weight"):
            validate_catalog(weights=weights)

    def test_non_decreasing_weights_fail(self):
        weights = dict(RARITY_WEIGHTS)
        weights[BuffRarity.EPIC] = weights[BuffRarity.RARE]
        with pytest.raises(ConfigurationError, match="strictly decrease"):
            validate_catalog(weights=weights)

    def test_bad_duration_fails(self):
        definitions = {
            BuffType.SHIELD: {"rarity": BuffRarity.RARE, "is_positive": True, "duration": 0},
        }
        with pytest.raises(ConfigurationError, match="duration"):
            validate_catalog(definitions=definitions)


class TestCreateBuff:
    """Tests for create_buff()."""

    def test_copies_definition(self):
        buff = create_buff(BuffType.DOUBLE_SCORE)
        assert buff.type == BuffType.DOUBLE_SCORE
        assert buff.rarity == BuffRarity.RARE
        assert buff.duration == 3
        assert buff.value == 2
        assert buff.is_positive

    def test_unique_ids(self):
        ids = {create_buff(BuffType.HINT).id for _ in range(50)}
        assert len(ids) == 50

    def test_instant_buffs_have_no_duration(self):
        for buff_type in (BuffType.EXTRA_TIME, BuffType.SHIELD, BuffType.LUCKY_CARD,
                          BuffType.HINT, BuffType.REVEAL_ANSWER):
            assert create_buff(buff_type).duration is None


class TestDrawCards:
    """Tests for draw_card() / draw_cards()."""

    def test_count(self):
        cards = draw_cards(7, rng=random.Random(1))
        assert len(cards) == 7

    def test_zero_or_negative_count(self):
        assert draw_cards(0) == []
        assert draw_cards(-3) == []

    def test_instances_are_independent(self):
        cards = draw_cards(30, rng=random.Random(2))
        assert len({c.id for c in cards}) == 30
        cards[0].value = 999
        assert all(c.value != 999 for c in cards[1:])

    def test_with_replacement(self):
        """40 draws from 12 types must repeat at least one type."""
        cards = draw_cards(40, rng=random.Random(3))
        counts = Counter(c.type for c in cards)
        assert max(counts.values()) > 1

    def test_seeded_determinism(self):
        first = [c.type for c in draw_cards(20, rng=random.Random(42))]
        second = [c.type for c in draw_cards(20, rng=random.Random(42))]
        assert first == second

    def test_only_positive(self):
        cards = draw_cards(200, rng=random.Random(4), only_positive=True)
        assert all(c.is_positive for c in cards)

    def test_tier_distribution_follows_weights(self):
        """Tier frequencies land near their share of the total weight."""
        rng = random.Random(1234)
        draws = 20000
        counts = Counter(draw_card(rng).rarity for _ in range(draws))
        total = sum(RARITY_WEIGHTS.values())
        for rarity, weight in RARITY_WEIGHTS.items():
            assert counts[rarity] / draws == pytest.approx(weight / total, abs=0.02)
        assert counts[BuffRarity.COMMON] > counts[BuffRarity.RARE] > counts[BuffRarity.EPIC] > counts[BuffRarity.LEGENDARY]

    def test_uniform_within_tier(self):
        rng = random.Random(99)
        rare_types = buff_types_by_rarity()[BuffRarity.RARE]
        counts = Counter(
            card.type for card in (draw_card(rng) for _ in range(20000))
            if card.rarity == BuffRarity.RARE
        )
        rare_total = sum(counts.values())
        for buff_type in rare_types:
            assert counts[buff_type] / rare_total == pytest.approx(1 / len(rare_types), abs=0.04)


class TestIsRare:
    def test_common_is_not_rare(self):
        assert not is_rare(create_buff(BuffType.HINT))

    def test_rare_and_above(self):
        assert is_rare(create_buff(BuffType.SHIELD))
        assert is_rare(create_buff(BuffType.LUCKY_CARD))
        assert is_rare(create_buff(BuffType.TIME_FREEZE))
