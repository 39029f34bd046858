"""
Template compatibility scoring.

Scores how well a chart template fits a dataset on a 0-100 scale, split into
four factors:
- data_type_match (0-40): column types the chart kind needs are present
- column_confidence (0-30): enough columns for the template
- user_correction_boost (0-20): reserved for learned user feedback
- clarity_score (0-10): simpler templates score higher

The score only ranks templates; eligibility is decided by ``is_compatible``.
"""

from typing import List, Optional, Sequence

from src.chart_engine.models.schema import (
    ChartTemplate,
    CompatibilityScore,
    DatasetProfile,
    ScoreFactors,
)
from src.shared_lib.utils.logger import get_logger

logger = get_logger(__name__)

MAX_SCORE = 100


# ============================================================================
# FACTORS
# ============================================================================


def data_type_match(template: ChartTemplate, profile: DatasetProfile) -> int:
    """Points (0-40) for the column types a chart kind needs."""
    chart_type = template.type

    if chart_type == "scorecard":
        return 40 if profile.has_numbers else 10

    if chart_type in ("line", "area"):
        if profile.has_dates and profile.has_numbers:
            return 35
        if profile.has_numbers:
            return 25
        return 10

    if chart_type == "scatter":
        if profile.number_columns >= 2:
            return 35
        if profile.number_columns >= 1:
            return 20
        return 10

    if chart_type == "bar":
        if profile.has_strings and profile.has_numbers:
            return 30
        if profile.has_numbers:
            return 20
        return 10

    if chart_type == "pie":
        if profile.has_strings and profile.has_numbers:
            # Many categorical columns make a pie hard to read
            if profile.string_columns <= 7:
                return 30
            if profile.string_columns <= 12:
                return 20
            return 10
        return 10

    if chart_type == "table":
        return 25

    return 20


def column_confidence(template: ChartTemplate, profile: DatasetProfile) -> int:
    """Points (0-30) for having at least ``min_columns`` columns."""
    if template.min_columns <= 0 or profile.column_count >= template.min_columns:
        return 30
    return int(profile.column_count / template.min_columns * 30)


def clarity_score(template: ChartTemplate) -> int:
    """Points (0-10) favoring templates that need fewer columns."""
    if template.min_columns <= 2:
        return 10
    if template.min_columns <= 4:
        return 7
    return 4


# ============================================================================
# COMPATIBILITY
# ============================================================================


def compatibility_message(template: ChartTemplate, profile: DatasetProfile) -> Optional[str]:
    """
    Reason why ``template`` cannot be used with ``profile``.

    Returns:
        Message, or None when the template is compatible
    """
    required = set(template.required_data_types)

    if profile.column_count == 0:
        return "No data available"
    if "number" in required and not profile.has_numbers:
        return "Requires numeric columns"
    if "string" in required and not profile.has_strings:
        return "Requires text columns"
    if "date" in required and not profile.has_dates:
        return "Requires date columns"
    if profile.column_count < template.min_columns:
        return f"Requires at least {template.min_columns} columns"
    return None


def is_compatible(template: ChartTemplate, profile: DatasetProfile) -> bool:
    """True when every required column type is present and there are enough columns."""
    return compatibility_message(template, profile) is None


def score(template: ChartTemplate, profile: DatasetProfile) -> CompatibilityScore:
    """
    Score ``template`` against ``profile``.

    Args:
        template: Chart template
        profile: Dataset profile

    Returns:
        CompatibilityScore with ``total == min(sum of factors, 100)``

    Example:
        >>> from src.chart_engine.scoring.templates import get_template
        >>> profile = DatasetProfile(column_count=2, number_columns=1, string_columns=1)
        >>> score(get_template("bar-comparison"), profile).total
        70
    """
    factors = ScoreFactors(
        data_type_match=data_type_match(template, profile),
        column_confidence=column_confidence(template, profile),
        user_correction_boost=0,
        clarity_score=clarity_score(template),
    )
    message = compatibility_message(template, profile)

    result = CompatibilityScore(
        template_id=template.id,
        total=min(factors.raw_total(), MAX_SCORE),
        factors=factors,
        compatible=message is None,
        message=message,
    )

    logger.debug(
        f"[Scorer] {template.id}: total={result.total} "
        f"({factors.model_dump()}) compatible={result.compatible}"
    )
    return result


def recommend(
    templates: Sequence[ChartTemplate],
    profile: DatasetProfile,
    include_incompatible: bool = False,
) -> List[CompatibilityScore]:
    """
    Rank templates for a dataset, best first.

    Ties keep catalog order.

    Args:
        templates: Template catalog
        profile: Dataset profile
        include_incompatible: Append incompatible templates after the ranked ones

    Returns:
        Scores sorted by total, descending
    """
    scores = [score(template, profile) for template in templates]
    compatible = sorted(
        (s for s in scores if s.compatible), key=lambda s: s.total, reverse=True
    )

    if include_incompatible:
        compatible.extend(s for s in scores if not s.compatible)

    logger.info(
        f"[Scorer] {len([s for s in scores if s.compatible])}/{len(scores)} templates "
        f"compatible with {profile.column_count} columns"
    )
    return compatible


__all__ = [
    "score",
    "is_compatible",
    "compatibility_message",
    "recommend",
    "data_type_match",
    "column_confidence",
    "clarity_score",
]
