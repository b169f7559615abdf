"""
Deck statistics.

Informational only: stats never influence validity. Computed over the
cards that are not the starting gold so that the type distribution always
sums to the deck-size total.
"""

from collections import Counter
from collections.abc import Sequence

from myldeck.models.deck import DeckEntry
from myldeck.models.validation import ComputedStats, TypeCostStats

GOLD_CARD_TYPE = "Oro"


def _sorted_counts(counter: Counter[str]) -> dict[str, int]:
    return {key: counter[key] for key in sorted(counter)}


def _weighted_avg(histogram: Counter[int]) -> float | None:
    qty = sum(histogram.values())
    if qty == 0:
        return None
    return round(sum(value * count for value, count in histogram.items()) / qty, 2)


def compute_stats(entries: Sequence[DeckEntry], gold_type: str = GOLD_CARD_TYPE) -> ComputedStats:
    """
    Compute the stats block for a deck.

    - cost_histogram / avg_cost: copies per integer cost of non-gold cards;
      null-cost cards are left out but still counted in total_cards
    - gold_histogram / avg_gold_value: the same over cards of gold_type
    - avg_cost_by_type: per type, copies, costed copies and their mean cost
    - race_distribution / rarity_distribution: null values are left out

    Averages are quantity-weighted and rounded to 2 decimals.
    """
    total = 0
    starting_gold = 0
    costs: Counter[int] = Counter()
    gold_values: Counter[int] = Counter()
    types: Counter[str] = Counter()
    races: Counter[str] = Counter()
    rarities: Counter[str] = Counter()
    costs_by_type: dict[str, Counter[int]] = {}

    for entry in entries:
        if entry.is_starting_gold:
            starting_gold += entry.quantity
            continue

        printing = entry.printing
        total += entry.quantity
        types[printing.card_type] += entry.quantity
        type_costs = costs_by_type.setdefault(printing.card_type, Counter())

        if printing.cost is not None:
            if printing.card_type == gold_type:
                gold_values[printing.cost] += entry.quantity
            else:
                costs[printing.cost] += entry.quantity
                type_costs[printing.cost] += entry.quantity
        if printing.race is not None:
            races[printing.race] += entry.quantity
        if printing.rarity is not None:
            rarities[printing.rarity] += entry.quantity

    return ComputedStats(
        total_cards=total,
        starting_gold_count=starting_gold,
        cost_histogram={cost: costs[cost] for cost in sorted(costs)},
        avg_cost=_weighted_avg(costs),
        gold_histogram={value: gold_values[value] for value in sorted(gold_values)},
        avg_gold_value=_weighted_avg(gold_values),
        avg_cost_by_type={
            card_type: TypeCostStats(
                qty=types[card_type],
                costed_qty=sum(costs_by_type[card_type].values()),
                avg=_weighted_avg(costs_by_type[card_type]),
            )
            for card_type in sorted(types)
        },
        type_distribution=_sorted_counts(types),
        race_distribution=_sorted_counts(races),
        rarity_distribution=_sorted_counts(rarities),
    )
