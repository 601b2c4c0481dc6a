"""
Class-relative ranking of student aggregates.

Ranking always works on an explicit roster snapshot: the class members and
their score entries for one period, read back to back. Positions computed
from a snapshot go stale if scores change afterwards; they are refreshed by
taking a new snapshot.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from django.db import models
from django.utils.translation import gettext_lazy as _

from .aggregation import aggregate_scores

logger = logging.getLogger(__name__)


class RankingMetric(models.TextChoices):
    AVERAGE = 'average', _('Overall average')
    EXAM_DOUBLED = 'exam_doubled', _('Total exam score x 2')


@dataclass(frozen=True)
class ClassPosition:
    position: int
    class_size: int
    ranked: bool = True


@dataclass
class ClassRosterSnapshot:
    """
    Class members and their score entries for one term/year.

    ``students`` keeps roster order, which is the tie order in rankings.
    ``entries`` maps student id to that student's entries in entry order.
    """
    class_name: str
    term: str
    year: str
    students: List = field(default_factory=list)
    entries: Dict = field(default_factory=dict)
    subject_names: Dict = field(default_factory=dict)

    def get_student(self, student_id):
        for student in self.students:
            if student.pk == student_id:
                return student
        return None

    def aggregate_for(self, student_id):
        return aggregate_scores(
            student_id, self.term, self.year,
            self.entries.get(student_id, []),
            self.subject_names,
        )

    def aggregates(self):
        """Aggregates for every roster member, in roster order."""
        return [self.aggregate_for(student.pk) for student in self.students]


def metric_value(aggregate, metric):
    metric = RankingMetric(metric)
    if metric == RankingMetric.AVERAGE:
        return aggregate.overall_average
    return aggregate.total_exam_score_doubled


def rank_aggregates(aggregates, metric=RankingMetric.AVERAGE):
    """
    Rank aggregates in descending order of the chosen metric.

    Students without any score entries are left out and do not count
    towards class size. Equal values keep their input order; no secondary
    tie-break is applied, so tied students get consecutive positions.

    Returns:
        dict: {student_id: ClassPosition}
    """
    try:
        metric = RankingMetric(metric)
    except ValueError:
        raise ValueError(f"Unknown ranking metric: {metric}")

    ranked = [a for a in aggregates if a.has_data]
    # sorted() is stable, also with reverse=True
    ranked = sorted(ranked, key=lambda a: metric_value(a, metric), reverse=True)

    class_size = len(ranked)
    return {
        aggregate.student_id: ClassPosition(position=index, class_size=class_size)
        for index, aggregate in enumerate(ranked, 1)
    }


def position_for(rankings, student_id):
    """
    Look up a student's position, falling back to 1 for unranked students.

    The fallback is flagged with ``ranked=False`` so callers can tell it
    apart from a genuine first place.
    """
    if student_id in rankings:
        return rankings[student_id]

    class_size = len(rankings)
    logger.debug(f"Student {student_id} is not ranked; using fallback position 1 of {class_size}")
    return ClassPosition(position=1, class_size=class_size, ranked=False)


def rank_snapshot(snapshot, metric=RankingMetric.AVERAGE):
    """Rank every member of a roster snapshot."""
    return rank_aggregates(snapshot.aggregates(), metric)
