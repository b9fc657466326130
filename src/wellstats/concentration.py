"""
Categorical tallies and Herfindahl–Hirschman concentration.

HHI is the sum of squared shares: 1.0 for a single category, 1/N for N
equal categories, None for an empty population.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

import pandas as pd

from wellstats.records import UNKNOWN


@dataclass(frozen=True)
class CategoryShare:
    label: str
    count: int
    share: float


@dataclass
class ConcentrationReport:
    """Per-category shares (descending count) and the HHI."""
    total: int
    hhi: Optional[float]
    categories: List[CategoryShare] = field(default_factory=list)
    
    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "hhi": self.hhi,
            "categories": [
                {"label": c.label, "count": c.count, "share": c.share}
                for c in self.categories
            ],
        }


def normalize_labels(values: Iterable[Any]) -> pd.Series:
    """Series of labels with missing values replaced by "Unknown"."""
    series = pd.Series(list(values), dtype="object")
    return series.where(series.notna(), UNKNOWN)


def tally(values: Iterable[Any]) -> pd.Series:
    """
    Count occurrences per label, descending by count.
    
    Missing values are counted under "Unknown". Ties keep first-seen order.
    """
    labels = normalize_labels(values)
    counts = labels.groupby(labels, sort=False).size()
    return counts.sort_values(ascending=False, kind="stable").astype("int64")


def herfindahl_index(
    counts: Mapping[str, int],
    total: Optional[int] = None,
) -> Optional[float]:
    """
    Sum of squared shares.
    
    Args:
        counts: Label -> count
        total: Population size. Defaults to the sum of counts.
    
    Returns:
        HHI, or None for an empty population
    """
    if total is None:
        total = sum(counts.values())
    if total <= 0:
        return None
    return float(sum((c / total) ** 2 for c in counts.values()))


def concentration_report(
    counts: Mapping[str, int],
    total: Optional[int] = None,
) -> ConcentrationReport:
    """Shares per category plus HHI over a label -> count mapping."""
    if total is None:
        total = sum(counts.values())
    
    ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    categories = [
        CategoryShare(label=str(label), count=int(count), share=float(count / total) if total else 0.0)
        for label, count in ordered
    ]
    
    return ConcentrationReport(
        total=int(total),
        hhi=herfindahl_index(counts, total),
        categories=categories,
    )
