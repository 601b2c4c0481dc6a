"""
Promotion eligibility classification.

Promotion itself uses the school's configurable criteria. Below those, a
fixed floor separates students who are reviewed from those who are retained.
The floor does not move with the configured criteria.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List

from django.db import models
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger(__name__)

# A subject is passed at 50% regardless of the configured promotion average
SUBJECT_PASS_MARK = 50

# Fixed review floor: below either value a student is retained outright
REVIEW_FLOOR_AVERAGE = 40
REVIEW_FLOOR_SUBJECTS_PASSED = 3


class InvalidPromotionCriteria(ValueError):
    """Raised when promotion criteria are out of range."""


class PromotionStatus(models.TextChoices):
    PROMOTE = 'promote', _('Promote')
    REVIEW = 'review', _('Under Review')
    RETAIN = 'retain', _('Retain')
    NO_SCORES = 'no-scores', _('No Scores')


@dataclass(frozen=True)
class PromotionCriteria:
    minimum_average: int = 50
    minimum_subjects_passed: int = 5
    total_subjects: int = 8

    def validate(self):
        """Raise InvalidPromotionCriteria if any threshold is out of range."""
        errors = []
        if self.minimum_average is None or not 0 <= self.minimum_average <= 100:
            errors.append(f"minimum average must be between 0 and 100 (got {self.minimum_average})")
        if self.total_subjects is None or self.total_subjects < 1:
            errors.append(f"total subjects must be at least 1 (got {self.total_subjects})")
        if self.minimum_subjects_passed is None or self.minimum_subjects_passed < 0:
            errors.append(
                f"minimum subjects passed cannot be negative (got {self.minimum_subjects_passed})"
            )
        elif self.total_subjects and self.minimum_subjects_passed > self.total_subjects:
            errors.append(
                f"minimum subjects passed ({self.minimum_subjects_passed}) "
                f"exceeds total subjects ({self.total_subjects})"
            )
        if errors:
            raise InvalidPromotionCriteria('; '.join(errors))
        return self

    @classmethod
    def from_settings(cls, school_settings):
        return cls(
            minimum_average=school_settings.min_average_for_promotion,
            minimum_subjects_passed=school_settings.min_subjects_to_pass,
            total_subjects=school_settings.total_subjects,
        )


@dataclass(frozen=True)
class SubjectResult:
    subject_name: str
    total_score: object
    passed: bool


@dataclass(frozen=True)
class PromotionResult:
    student_id: int
    status: str
    overall_average: int = 0
    passed_subjects: int = 0
    subjects: List[SubjectResult] = field(default_factory=list)

    @property
    def subjects_taken(self):
        return len(self.subjects)


def count_passed_subjects(aggregate):
    return sum(1 for s in aggregate.subjects if s.total_score >= SUBJECT_PASS_MARK)


def classify_promotion(aggregate, criteria):
    """
    Classify a student's promotion status from their aggregate.

    Never raises for missing data: a student without entries is NO_SCORES.
    Raises InvalidPromotionCriteria only when the criteria are malformed.
    """
    criteria.validate()

    if not aggregate.has_data:
        return PromotionResult(student_id=aggregate.student_id, status=PromotionStatus.NO_SCORES)

    subjects = [
        SubjectResult(
            subject_name=s.subject_name,
            total_score=s.total_score,
            passed=s.total_score >= SUBJECT_PASS_MARK,
        )
        for s in aggregate.subjects
    ]
    passed = sum(1 for s in subjects if s.passed)
    average = aggregate.overall_average

    if average >= criteria.minimum_average and passed >= criteria.minimum_subjects_passed:
        status = PromotionStatus.PROMOTE
    elif average >= REVIEW_FLOOR_AVERAGE and passed >= REVIEW_FLOOR_SUBJECTS_PASSED:
        status = PromotionStatus.REVIEW
    else:
        status = PromotionStatus.RETAIN

    logger.debug(
        f"Student {aggregate.student_id}: average {average}, "
        f"{passed}/{len(subjects)} passed -> {status}"
    )

    return PromotionResult(
        student_id=aggregate.student_id,
        status=status,
        overall_average=average,
        passed_subjects=passed,
        subjects=subjects,
    )


def promotion_statistics(results):
    """
    Count results by status.

    Returns:
        dict: {'total': int, 'promote': int, 'review': int, 'retain': int, 'no-scores': int}
    """
    counts = Counter(r.status for r in results)
    stats = {'total': len(results)}
    for status in PromotionStatus:
        stats[status.value] = counts.get(status, 0)
    return stats
