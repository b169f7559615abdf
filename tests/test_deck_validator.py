"""
Tests for the deck validation engine.

Decks are built from numbered filler allies (3 copies each) plus one
starting gold card, so the deck-size total is easy to control.
"""

from typing import Any

import pytest

from myldeck.models.card import CardPrintingRef, LegalStatus
from myldeck.models.deck import DeckEntry
from myldeck.models.format_rules import FormatRuleSet, TypeQuota
from myldeck.models.validation import Severity, TypeCostStats, ValidationCode
from myldeck.services.deck_validator import aggregate_by_card, validate_deck

# =============================================================================
# HELPERS
# =============================================================================


def _printing(
    printing_id: str,
    card_id: str,
    name: str,
    card_type: str = "Aliado",
    cost: int | None = 2,
    race: str | None = "Caballero",
    edition_id: str = "ed-es",
    legal_status: LegalStatus = LegalStatus.STANDARD,
    **extra: Any,
) -> CardPrintingRef:
    extra.setdefault("block_id", "blk-hel")
    return CardPrintingRef(
        printing_id=printing_id,
        card_id=card_id,
        card_name=name,
        edition_id=edition_id,
        edition_name="Espada Sagrada" if edition_id == "ed-es" else "Mundo Gótico",
        card_type=card_type,
        cost=cost,
        race=race,
        rarity="Común",
        legal_status=legal_status,
        **extra,
    )


GOLD = _printing("p-oro", "c-oro", "Oro Básico", card_type="Oro", cost=None, race=None)


def _gold(qty: int = 1) -> DeckEntry:
    return DeckEntry(printing=GOLD, quantity=qty, is_starting_gold=True)


def _filler(total: int) -> list[DeckEntry]:
    """Distinct allies adding up to `total` non-gold cards, 3 copies max each."""
    entries: list[DeckEntry] = []
    number = 0
    while total > 0:
        qty = min(3, total)
        printing = _printing(f"p-fill-{number:02d}", f"c-fill-{number:02d}", f"Aliado {number:02d}")
        entries.append(DeckEntry(printing=printing, quantity=qty))
        total -= qty
        number += 1
    return entries


def _deck(total: int = 50, with_gold: bool = True) -> list[DeckEntry]:
    return _filler(total) + ([_gold()] if with_gold else [])


@pytest.fixture
def rules() -> FormatRuleSet:
    return FormatRuleSet(format_id="racial")


# =============================================================================
# DECK SIZE
# =============================================================================


class TestDeckSize:
    """Tests for the exact deck-size rule."""

    def test_exact_size_is_valid(self, rules: FormatRuleSet) -> None:
        """50 non-gold cards and a starting gold is a valid deck."""
        result = validate_deck(rules, _deck(50))

        assert result.is_valid is True
        assert result.messages == ()

    def test_one_missing(self, rules: FormatRuleSet) -> None:
        """49 cards is one short, with the delta in the context."""
        result = validate_deck(rules, _deck(49))

        assert result.is_valid is False
        assert result.codes() == [ValidationCode.DECK_TOO_FEW_CARDS]
        message = result.messages[0]
        assert message.severity == Severity.BLOCK
        assert "1 missing" in message.message
        assert message.context == {"expected": 50, "found": 49, "delta": -1}

    def test_one_too_many(self, rules: FormatRuleSet) -> None:
        """51 cards is one too many."""
        result = validate_deck(rules, _deck(51))

        assert result.codes() == [ValidationCode.DECK_TOO_MANY_CARDS]
        assert result.messages[0].context["delta"] == 1

    def test_starting_gold_not_counted(self, rules: FormatRuleSet) -> None:
        """50 filler cards plus the starting gold is exactly 50."""
        result = validate_deck(rules, _deck(50))

        assert result.computed_stats.total_cards == 50
        assert result.computed_stats.starting_gold_count == 1

    def test_empty_deck(self, rules: FormatRuleSet) -> None:
        """An empty deck still gets a full result."""
        result = validate_deck(rules, [])

        assert result.is_valid is False
        assert result.codes() == [
            ValidationCode.DECK_TOO_FEW_CARDS,
            ValidationCode.STARTING_GOLD_MISSING,
        ]
        assert result.computed_stats.total_cards == 0
        assert result.computed_stats.avg_cost is None
        assert result.computed_stats.type_distribution == {}


# =============================================================================
# STARTING GOLD
# =============================================================================


class TestStartingGold:
    """Tests for the starting gold count and eligibility rules."""

    def test_missing(self, rules: FormatRuleSet) -> None:
        """A deck without a flagged entry is missing its starting gold."""
        result = validate_deck(rules, _deck(50, with_gold=False))

        assert result.codes() == [ValidationCode.STARTING_GOLD_MISSING]

    def test_not_required(self) -> None:
        """Formats may waive the starting gold."""
        rules = FormatRuleSet(format_id="libre", starting_gold_required=False)

        result = validate_deck(rules, _deck(50, with_gold=False))

        assert result.is_valid is True

    def test_two_flagged_entries(self, rules: FormatRuleSet) -> None:
        """Two flagged entries are one too many."""
        other_gold = _printing("p-oro-2", "c-oro-2", "Oro Real", card_type="Oro", cost=None)
        entries = _deck(50) + [DeckEntry(other_gold, 1, is_starting_gold=True)]

        result = validate_deck(rules, entries)

        assert result.codes() == [ValidationCode.STARTING_GOLD_MULTIPLE]
        assert result.messages[0].context == {"expected": 1, "found": 2}

    def test_flagged_quantity_two(self, rules: FormatRuleSet) -> None:
        """A single flagged entry with two copies counts as two."""
        result = validate_deck(rules, _filler(50) + [_gold(qty=2)])

        assert result.codes() == [ValidationCode.STARTING_GOLD_MULTIPLE]

    def test_wrong_type(self) -> None:
        """The starting gold must be of the configured type."""
        rules = FormatRuleSet(format_id="racial", starting_gold_type="Oro")
        ally = _printing("p-arturo", "c-arturo", "Arturo")
        entries = _filler(50) + [DeckEntry(ally, 1, is_starting_gold=True)]

        result = validate_deck(rules, entries)

        assert result.codes() == [ValidationCode.STARTING_GOLD_WRONG_TYPE]
        assert result.messages[0].context["card_type"] == "Aliado"

    def test_right_type(self) -> None:
        """A gold card of the configured type passes."""
        rules = FormatRuleSet(format_id="racial", starting_gold_type="Oro")

        assert validate_deck(rules, _deck(50)).is_valid is True

    def test_gold_with_ability(self, rules: FormatRuleSet) -> None:
        """A gold card with an ability cannot be the starting gold."""
        gold = _printing(
            "p-oro-dama",
            "c-oro-dama",
            "Oro de la Dama",
            card_type="Oro",
            cost=None,
            race=None,
            has_ability=True,
        )
        entries = _filler(50) + [DeckEntry(gold, 1, is_starting_gold=True)]

        result = validate_deck(rules, entries)

        assert result.is_valid is False
        assert result.codes() == [ValidationCode.STARTING_GOLD_MUST_HAVE_NO_ABILITY]
        assert result.messages[0].context["card_printing_id"] == "p-oro-dama"

    def test_gold_with_ability_in_main_deck(self, rules: FormatRuleSet) -> None:
        """Gold with an ability is fine outside the starting gold slot."""
        gold = _printing(
            "p-oro-dama",
            "c-oro-dama",
            "Oro de la Dama",
            card_type="Oro",
            cost=None,
            race=None,
            has_ability=True,
        )

        assert validate_deck(rules, _deck(49) + [DeckEntry(gold, 1)]).is_valid is True

    def test_printing_not_allowed_as_starting_gold(self, rules: FormatRuleSet) -> None:
        """The catalog can forbid a printing from being the starting gold."""
        gold = _printing(
            "p-oro-promo",
            "c-oro",
            "Oro Básico",
            card_type="Oro",
            cost=None,
            race=None,
            can_be_starting_gold=False,
        )
        entries = _filler(50) + [DeckEntry(gold, 1, is_starting_gold=True)]

        result = validate_deck(rules, entries)

        assert result.codes() == [ValidationCode.STARTING_GOLD_NOT_ALLOWED_FOR_PRINTING]
        assert result.messages[0].context["can_be_starting_gold"] is False

    def test_eligibility_messages_in_order(self) -> None:
        """Type, ability and printing checks are reported in that order."""
        rules = FormatRuleSet(format_id="racial", starting_gold_type="Oro")
        ally = _printing(
            "p-arturo", "c-arturo", "Arturo", has_ability=True, can_be_starting_gold=False
        )
        entries = _filler(50) + [DeckEntry(ally, 1, is_starting_gold=True)]

        result = validate_deck(rules, entries)

        assert result.codes() == [
            ValidationCode.STARTING_GOLD_WRONG_TYPE,
            ValidationCode.STARTING_GOLD_MUST_HAVE_NO_ABILITY,
            ValidationCode.STARTING_GOLD_NOT_ALLOWED_FOR_PRINTING,
        ]


# =============================================================================
# COPY LIMITS
# =============================================================================


class TestCopyLimits:
    """Tests for per-card copy limits and bans."""

    def test_limit_counts_across_printings(self, rules: FormatRuleSet) -> None:
        """Copies of one card in different editions add up."""
        first = _printing("p-arturo-es", "c-arturo", "Arturo")
        second = _printing("p-arturo-mg", "c-arturo", "Arturo", edition_id="ed-mg")
        entries = _deck(46) + [DeckEntry(first, 2), DeckEntry(second, 2)]

        result = validate_deck(rules, entries)

        assert result.codes() == [ValidationCode.CARD_LIMIT_EXCEEDED]
        assert result.messages[0].context == {
            "card_id": "c-arturo",
            "card_name": "Arturo",
            "held": 4,
            "limit": 3,
        }

    def test_three_copies_allowed(self, rules: FormatRuleSet) -> None:
        """Exactly the default limit is allowed."""
        arturo = _printing("p-arturo-es", "c-arturo", "Arturo")
        entries = _deck(47) + [DeckEntry(arturo, 3)]

        assert validate_deck(rules, entries).is_valid is True

    def test_restricted_card(self) -> None:
        """A per-card override replaces the default limit."""
        rules = FormatRuleSet(format_id="racial", card_limits={"c-fill-00": 1})

        result = validate_deck(rules, _deck(50))

        assert ValidationCode.CARD_LIMIT_EXCEEDED in result.codes()
        assert result.messages[-1].context["limit"] == 1

    def test_banned_card(self) -> None:
        """A limit of 0 bans the card."""
        rules = FormatRuleSet(format_id="racial", card_limits={"c-fill-01": 0})

        result = validate_deck(rules, _deck(50))

        assert result.codes() == [ValidationCode.CARD_BANNED]
        assert result.is_valid is False

    def test_banned_starting_gold(self) -> None:
        """Bans apply to the starting gold too."""
        rules = FormatRuleSet(format_id="racial", card_limits={"c-oro": 0})

        result = validate_deck(rules, _deck(50))

        assert result.codes() == [ValidationCode.CARD_BANNED]
        assert result.messages[0].context["card_name"] == "Oro Básico"

    def test_messages_ordered_by_card_name(self, rules: FormatRuleSet) -> None:
        """Limit messages are ordered by card name, not deck order."""
        zorro = _printing("p-zorro", "c-zorro", "Zorro")
        arturo = _printing("p-arturo", "c-arturo", "Arturo")
        entries = _deck(42) + [DeckEntry(zorro, 4), DeckEntry(arturo, 4)]

        result = validate_deck(rules, entries)

        assert [m.context["card_name"] for m in result.messages] == ["Arturo", "Zorro"]


class TestUniqueCards:
    """Tests for cards that may be included only once."""

    @pytest.fixture
    def merlin(self) -> CardPrintingRef:
        return _printing("p-merlin", "c-merlin", "Merlín", is_unique=True)

    def test_unique_card_held_three_times(self, merlin: CardPrintingRef) -> None:
        """Three copies of a unique card fail even within the default limit."""
        rules = FormatRuleSet(format_id="libre", deck_size=3, starting_gold_required=False)

        result = validate_deck(rules, [DeckEntry(merlin, 3)])

        assert result.is_valid is False
        assert result.codes() == [ValidationCode.UNIQUE_CARD_MAX_1]
        assert result.messages[0].context == {
            "card_id": "c-merlin",
            "card_name": "Merlín",
            "held": 3,
            "limit": 1,
        }

    def test_single_copy_allowed(self, rules: FormatRuleSet, merlin: CardPrintingRef) -> None:
        """One copy of a unique card is fine."""
        assert validate_deck(rules, _deck(49) + [DeckEntry(merlin, 1)]).is_valid is True

    def test_counts_across_printings(self, rules: FormatRuleSet, merlin: CardPrintingRef) -> None:
        """Two printings of a unique card are two copies."""
        reprint = _printing("p-merlin-mg", "c-merlin", "Merlín", edition_id="ed-mg", is_unique=True)
        entries = _deck(48) + [DeckEntry(merlin, 1), DeckEntry(reprint, 1)]

        assert validate_deck(rules, entries).codes() == [ValidationCode.UNIQUE_CARD_MAX_1]

    def test_reported_with_copy_limit(self, rules: FormatRuleSet, merlin: CardPrintingRef) -> None:
        """Over the copy limit, both the limit and the uniqueness are reported."""
        result = validate_deck(rules, _deck(46) + [DeckEntry(merlin, 4)])

        assert result.codes() == [
            ValidationCode.CARD_LIMIT_EXCEEDED,
            ValidationCode.UNIQUE_CARD_MAX_1,
        ]

    def test_banned_unique_card(self, merlin: CardPrintingRef) -> None:
        """A banned unique card is only reported as banned."""
        rules = FormatRuleSet(format_id="racial", card_limits={"c-merlin": 0})

        result = validate_deck(rules, _deck(48) + [DeckEntry(merlin, 2)])

        assert result.codes() == [ValidationCode.CARD_BANNED]


# =============================================================================
# LEGAL STATUS
# =============================================================================


class TestLegalStatus:
    """Tests for discontinued printings."""

    @pytest.fixture
    def discontinued(self) -> CardPrintingRef:
        return _printing(
            "p-excalibur",
            "c-excalibur",
            "Excalibur",
            card_type="Arma",
            legal_status=LegalStatus.DISCONTINUED,
        )

    def test_warn_keeps_deck_valid(
        self, rules: FormatRuleSet, discontinued: CardPrintingRef
    ) -> None:
        """With the default severity, a discontinued printing only warns."""
        result = validate_deck(rules, _deck(48) + [DeckEntry(discontinued, 2)])

        assert result.is_valid is True
        assert result.codes() == [ValidationCode.PRINTING_DISCONTINUED]
        assert result.warnings == result.messages

    def test_block_makes_deck_invalid(
        self, strict_discontinued_rules: FormatRuleSet, discontinued: CardPrintingRef
    ) -> None:
        """A format can make discontinued printings blocking."""
        result = validate_deck(strict_discontinued_rules, _deck(48) + [DeckEntry(discontinued, 2)])

        assert result.is_valid is False
        assert result.blocking[0].code == ValidationCode.PRINTING_DISCONTINUED

    def test_one_message_per_printing(
        self, rules: FormatRuleSet, discontinued: CardPrintingRef
    ) -> None:
        """Repeated entries of one printing yield one message."""
        entries = _deck(48) + [DeckEntry(discontinued, 1), DeckEntry(discontinued, 1)]

        result = validate_deck(rules, entries)

        assert result.codes() == [ValidationCode.PRINTING_DISCONTINUED]


# =============================================================================
# TYPE QUOTAS AND ALLOWANCES
# =============================================================================


class TestTypeQuotas:
    """Tests for per-type minimum and maximum counts."""

    def test_below_minimum(self) -> None:
        """Too few cards of a type."""
        rules = FormatRuleSet(format_id="racial", type_quotas=(TypeQuota("Arma", minimum=1),))

        result = validate_deck(rules, _deck(50))

        assert result.codes() == [ValidationCode.TYPE_QUOTA_BELOW_MINIMUM]
        assert result.messages[0].context["found"] == 0

    def test_above_maximum(self) -> None:
        """Too many cards of a type."""
        rules = FormatRuleSet(format_id="racial", type_quotas=(TypeQuota("Aliado", maximum=40),))

        result = validate_deck(rules, _deck(50))

        assert result.codes() == [ValidationCode.TYPE_QUOTA_ABOVE_MAXIMUM]

    def test_gold_not_counted_in_quota(self) -> None:
        """The starting gold does not count towards type quotas."""
        rules = FormatRuleSet(format_id="racial", type_quotas=(TypeQuota("Oro", maximum=0),))

        assert validate_deck(rules, _deck(50)).is_valid is True

    def test_warn_quota(self) -> None:
        """A WARN quota does not invalidate the deck."""
        quota = TypeQuota("Arma", minimum=2, severity=Severity.WARN)
        rules = FormatRuleSet(format_id="racial", type_quotas=(quota,))

        result = validate_deck(rules, _deck(50))

        assert result.is_valid is True
        assert result.warnings[0].code == ValidationCode.TYPE_QUOTA_BELOW_MINIMUM


class TestAllowances:
    """Tests for block, edition and race allowances."""

    def test_block_not_allowed(self) -> None:
        """A printing from another block is rejected."""
        rules = FormatRuleSet(format_id="racial", allowed_block_ids=frozenset({"blk-hel"}))
        sombra = _printing("p-sombra", "c-sombra", "Sombra", block_id="blk-pb")

        result = validate_deck(rules, _deck(49) + [DeckEntry(sombra, 1)])

        assert result.is_valid is False
        assert result.codes() == [ValidationCode.FORMAT_ALLOWED_BLOCK]
        assert result.messages[0].context["block_id"] == "blk-pb"

    def test_printing_without_block(self) -> None:
        """A printing with no block cannot pass a block allowance."""
        rules = FormatRuleSet(format_id="racial", allowed_block_ids=frozenset({"blk-hel"}))
        sombra = _printing("p-sombra", "c-sombra", "Sombra", block_id=None)

        result = validate_deck(rules, _deck(49) + [DeckEntry(sombra, 1)])

        assert result.codes() == [ValidationCode.FORMAT_ALLOWED_BLOCK]

    def test_allowed_block_passes(self) -> None:
        """Printings from an allowed block pass."""
        rules = FormatRuleSet(format_id="racial", allowed_block_ids=frozenset({"blk-hel"}))

        assert validate_deck(rules, _deck(50)).is_valid is True

    def test_edition_not_allowed(self) -> None:
        """A printing from another edition is rejected."""
        rules = FormatRuleSet(format_id="racial", allowed_edition_ids=frozenset({"ed-es"}))
        sombra = _printing("p-sombra", "c-sombra", "Sombra", edition_id="ed-mg")

        result = validate_deck(rules, _deck(49) + [DeckEntry(sombra, 1)])

        assert result.codes() == [ValidationCode.EDITION_NOT_ALLOWED]
        assert result.messages[0].context["edition_id"] == "ed-mg"

    def test_block_before_edition(self) -> None:
        """Block messages come before edition messages."""
        rules = FormatRuleSet(
            format_id="racial",
            allowed_block_ids=frozenset({"blk-hel"}),
            allowed_edition_ids=frozenset({"ed-es"}),
        )
        sombra = _printing("p-sombra", "c-sombra", "Sombra", edition_id="ed-mg", block_id="blk-pb")

        result = validate_deck(rules, _deck(49) + [DeckEntry(sombra, 1)])

        assert result.codes() == [
            ValidationCode.FORMAT_ALLOWED_BLOCK,
            ValidationCode.EDITION_NOT_ALLOWED,
        ]

    def test_race_not_allowed(self) -> None:
        """A card of another race is rejected."""
        rules = FormatRuleSet(format_id="racial", allowed_races=frozenset({"Caballero"}))
        sombra = _printing("p-sombra", "c-sombra", "Sombra", race="Sombra")

        result = validate_deck(rules, _deck(49) + [DeckEntry(sombra, 1)])

        assert result.codes() == [ValidationCode.RACE_NOT_ALLOWED]

    def test_raceless_cards_pass(self) -> None:
        """Cards without a race pass the race allowance."""
        rules = FormatRuleSet(format_id="racial", allowed_races=frozenset({"Caballero"}))

        assert validate_deck(rules, _deck(50)).is_valid is True


# =============================================================================
# STATS
# =============================================================================


class TestStats:
    """Tests for the computed stats block."""

    def test_type_distribution_sums_to_total(self, rules: FormatRuleSet) -> None:
        """The type distribution adds up to the deck-size total."""
        arma = _printing("p-arma", "c-arma", "Lanza", card_type="Arma", cost=None, race=None)
        result = validate_deck(rules, _deck(47) + [DeckEntry(arma, 3)])
        stats = result.computed_stats

        assert sum(stats.type_distribution.values()) == stats.total_cards == 50
        assert stats.type_distribution == {"Aliado": 47, "Arma": 3}
        assert sum(stats.cost_histogram.values()) == 47
        assert stats.race_distribution == {"Caballero": 47}

    def test_avg_cost(self, rules: FormatRuleSet) -> None:
        """The average cost is weighted by quantity."""
        cheap = _printing("p-cheap", "c-cheap", "Barato", cost=1)
        dear = _printing("p-dear", "c-dear", "Caro", cost=4)
        result = validate_deck(rules, [DeckEntry(cheap, 3), DeckEntry(dear, 1), _gold()])

        assert result.computed_stats.cost_histogram == {1: 3, 4: 1}
        assert result.computed_stats.avg_cost == 1.75

    def test_gold_cards_have_their_own_histogram(self, rules: FormatRuleSet) -> None:
        """Gold values go to the gold histogram, not the cost histogram."""
        oro_real = _printing(
            "p-oro-real", "c-oro-real", "Oro Real", card_type="Oro", cost=2, race=None
        )
        result = validate_deck(rules, _deck(47) + [DeckEntry(oro_real, 3)])
        stats = result.computed_stats

        assert stats.cost_histogram == {2: 47}
        assert stats.gold_histogram == {2: 3}
        assert stats.avg_gold_value == 2.0
        assert stats.total_cards == 50

    def test_starting_gold_not_in_gold_histogram(self, rules: FormatRuleSet) -> None:
        """The starting gold is counted only as starting gold."""
        stats = validate_deck(rules, _deck(50)).computed_stats

        assert stats.gold_histogram == {}
        assert stats.avg_gold_value is None

    def test_avg_cost_by_type(self, rules: FormatRuleSet) -> None:
        """Per-type averages; gold and costless cards count in qty only."""
        arma = _printing("p-arma", "c-arma", "Lanza", card_type="Arma", cost=None, race=None)
        oro_real = _printing(
            "p-oro-real", "c-oro-real", "Oro Real", card_type="Oro", cost=2, race=None
        )
        entries = _deck(44) + [DeckEntry(arma, 3), DeckEntry(oro_real, 3)]

        stats = validate_deck(rules, entries).computed_stats

        assert stats.avg_cost_by_type == {
            "Aliado": TypeCostStats(qty=44, costed_qty=44, avg=2.0),
            "Arma": TypeCostStats(qty=3, costed_qty=0, avg=None),
            "Oro": TypeCostStats(qty=3, costed_qty=0, avg=None),
        }

    def test_gold_type_follows_format(self) -> None:
        """The format's starting gold type decides which cards are gold."""
        tesoro_rules = FormatRuleSet(format_id="tesoro", starting_gold_type="Tesoro")
        tesoro = _printing(
            "p-tesoro", "c-tesoro", "Cofre", card_type="Tesoro", cost=1, race=None
        )
        entries = _filler(47) + [
            DeckEntry(tesoro, 3),
            DeckEntry(tesoro, 1, is_starting_gold=True),
        ]

        stats = validate_deck(tesoro_rules, entries).computed_stats

        assert stats.gold_histogram == {1: 3}
        assert 1 not in stats.cost_histogram


# =============================================================================
# WHOLE-RESULT PROPERTIES
# =============================================================================


class TestResultProperties:
    """Tests for properties of the result as a whole."""

    def test_idempotent(self, rules: FormatRuleSet) -> None:
        """The same input gives an equal result."""
        entries = _deck(49) + [_gold()]

        assert validate_deck(rules, entries) == validate_deck(rules, entries)

    def test_rule_order(self) -> None:
        """Messages follow the rule evaluation order."""
        rules = FormatRuleSet(
            format_id="racial",
            card_limits={"c-fill-00": 0},
            type_quotas=(TypeQuota("Arma", minimum=1),),
            allowed_block_ids=frozenset({"blk-pb"}),
        )
        merlin = _printing("p-merlin", "c-merlin", "Merlín", is_unique=True, block_id="blk-pb")
        entries = [*_filler(9), DeckEntry(merlin, 2)]

        result = validate_deck(rules, entries)

        assert result.codes() == [
            ValidationCode.DECK_TOO_FEW_CARDS,
            ValidationCode.STARTING_GOLD_MISSING,
            ValidationCode.CARD_BANNED,
            ValidationCode.UNIQUE_CARD_MAX_1,
            ValidationCode.TYPE_QUOTA_BELOW_MINIMUM,
            ValidationCode.FORMAT_ALLOWED_BLOCK,
            ValidationCode.FORMAT_ALLOWED_BLOCK,
            ValidationCode.FORMAT_ALLOWED_BLOCK,
        ]

    def test_to_dict(self, rules: FormatRuleSet) -> None:
        """The dict form is JSON-ready, with string keys for histograms."""
        data = validate_deck(rules, _deck(49)).to_dict()

        assert data["is_valid"] is False
        assert data["messages"][0]["code"] == "DECK_TOO_FEW_CARDS"
        assert data["computed_stats"]["cost_histogram"] == {"2": 49}
        assert data["computed_stats"]["gold_histogram"] == {}
        assert data["computed_stats"]["avg_cost_by_type"] == {
            "Aliado": {"qty": 49, "costed_qty": 49, "avg": 2.0}
        }


class TestAggregateByCard:
    """Tests for per-card aggregation."""

    def test_totals_and_non_gold(self) -> None:
        """Totals include the starting gold, non_gold does not."""
        tallies = aggregate_by_card([_gold(), DeckEntry(GOLD, 2)])

        assert tallies["c-oro"].total == 3
        assert tallies["c-oro"].non_gold == 2
