"""
Qualification calculator for recipe collections.

- qualified: published_count >= min_required (pending/draft recipes never count)
- near: not qualified, but progress towards target_count >= 80%
- unqualified: everything else

``min_required`` and ``target_count`` are configured independently and need
not bear any fixed ratio.
"""

from typing import Any
from enum import Enum
import math

from pydantic import BaseModel, ConfigDict, Field

NEAR_PROGRESS_THRESHOLD = 80


class QualifiedStatus(str, Enum):
    """Computed, never stored."""
    QUALIFIED = "QUALIFIED"
    NEAR = "NEAR"
    UNQUALIFIED = "UNQUALIFIED"


class StatusInfo(BaseModel):
    """Display hints for a qualification status."""
    label: str
    color: str
    icon: str


class QualificationReport(BaseModel):
    """Progress and status of one collection."""
    published_count: int = Field(..., alias="publishedCount")
    target_count: int = Field(..., alias="targetCount")
    min_required: int = Field(..., alias="minRequired")
    progress: int = Field(..., ge=0, le=100)
    status: QualifiedStatus
    remaining: int = Field(..., ge=0, description="Published recipes still missing to qualify")

    model_config = ConfigDict(populate_by_name=True)


_STATUS_INFO = {
    QualifiedStatus.QUALIFIED: StatusInfo(label="Qualified", color="green", icon="✓"),
    QualifiedStatus.NEAR: StatusInfo(label="Nearly qualified", color="yellow", icon="⚠"),
    QualifiedStatus.UNQUALIFIED: StatusInfo(label="Not qualified", color="red", icon="✗"),
}


def _as_count(value: Any) -> float:
    """Clamp a count to a finite, non-negative number; anything else reads as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def calculate_progress(published_count: Any, target_count: Any) -> int:
    """Percentage of *target_count* reached, rounded half up and clamped to 0..100."""
    published = _as_count(published_count)
    target = _as_count(target_count)
    if target <= 0:
        return 0
    progress = math.floor(published / target * 100 + 0.5)
    return max(0, min(100, progress))


def calculate_qualified_status(
    published_count: Any,
    min_required: Any,
    target_count: Any,
    near_threshold: int = NEAR_PROGRESS_THRESHOLD,
) -> QualifiedStatus:
    """Classify a collection from its published, minimum and target counts."""
    published = _as_count(published_count)
    if published >= _as_count(min_required):
        return QualifiedStatus.QUALIFIED

    if calculate_progress(published, target_count) >= near_threshold:
        return QualifiedStatus.NEAR

    return QualifiedStatus.UNQUALIFIED


def get_qualified_status_info(status: QualifiedStatus) -> StatusInfo:
    return _STATUS_INFO[QualifiedStatus(status)]


def assess_collection(
    published_count: Any,
    target_count: Any,
    min_required: Any,
    near_threshold: int = NEAR_PROGRESS_THRESHOLD,
) -> QualificationReport:
    """Build the full qualification report shown on the admin dashboard."""
    published = int(_as_count(published_count))
    target = int(_as_count(target_count))
    minimum = int(_as_count(min_required))

    return QualificationReport(
        published_count=published,
        target_count=target,
        min_required=minimum,
        progress=calculate_progress(published, target),
        status=calculate_qualified_status(published, minimum, target, near_threshold=near_threshold),
        remaining=max(minimum - published, 0),
    )
