"""
Score-to-grade mapping.

Two grading scales are in use: the four-band scale printed on report cards
and transcripts, and the six-band scale used in guardian notifications.
Both are defined here as named schemes sharing one lookup.
"""
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _


class GradingScheme(models.TextChoices):
    FOUR_BAND = 'four_band', _('Report card (A-D)')
    SIX_BAND = 'six_band', _('Notification (A+-F)')


# (grade, minimum total score), highest band first
GRADE_THRESHOLDS = {
    GradingScheme.FOUR_BAND: (
        ('A', 80),
        ('B', 70),
        ('C', 60),
        ('D', 0),
    ),
    GradingScheme.SIX_BAND: (
        ('A+', 90),
        ('A', 80),
        ('B+', 70),
        ('B', 60),
        ('C', 50),
        ('F', 0),
    ),
}

GRADE_REMARKS = {
    'A': 'Excellent',
    'B': 'Very Good',
    'C': 'Good',
    'D': 'Needs Improvement',
}


def classify(total_score, scheme=GradingScheme.FOUR_BAND):
    """
    Map a total score (0-100) to a letter grade under the given scheme.

    Scores below every threshold fall into the lowest band, so the
    mapping is total over any numeric input.
    """
    try:
        bands = GRADE_THRESHOLDS[GradingScheme(scheme)]
    except ValueError:
        raise ValueError(f"Unknown grading scheme: {scheme}")

    score = Decimal(str(total_score))
    for grade, threshold in bands:
        if score >= threshold:
            return grade
    return bands[-1][0]


def grade_remark(grade):
    """Report-card remark for a four-band grade."""
    return GRADE_REMARKS.get(grade, 'No Grade')
