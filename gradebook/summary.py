"""
Academic summary: the denormalised record behind report cards, transcripts
and guardian notifications.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from .aggregation import SubjectSummary
from .grading import GradingScheme, classify
from .ranking import RankingMetric, position_for, rank_aggregates

logger = logging.getLogger(__name__)

# (minimum average, narrative), highest bucket first
PERFORMANCE_MESSAGES = (
    (90, 'performed excellently and should be congratulated for outstanding achievement'),
    (80, 'performed very well and is making excellent progress in academic studies'),
    (70, 'performed well and is showing good improvement across subjects'),
    (60, 'performed satisfactorily but can improve with more effort and focus'),
    (50, 'needs additional support and encouragement to improve academic performance'),
    (0, 'requires urgent attention and extra support to meet academic standards'),
)


def performance_message(average):
    """Narrative for an overall average, independent of either grade scale."""
    for threshold, message in PERFORMANCE_MESSAGES:
        if average >= threshold:
            return message
    return PERFORMANCE_MESSAGES[-1][1]


@dataclass(frozen=True)
class AcademicSummary:
    student_id: int
    student_name: str
    class_name: str
    term: str
    academic_year: str
    subjects: List[SubjectSummary] = field(default_factory=list)
    total_exam_score: Decimal = Decimal('0')
    total_exam_score_doubled: Decimal = Decimal('0')
    overall_average: int = 0
    # Four-band, printed on report cards
    overall_grade: Optional[str] = None
    # Six-band, used in guardian notifications
    actual_grade: Optional[str] = None
    position: int = 1
    class_size: int = 0
    ranked: bool = False
    ranking_metric: str = RankingMetric.EXAM_DOUBLED
    performance_message: str = ''
    guardian_name: str = ''
    guardian_phone: str = ''
    school_name: str = ''

    @property
    def has_data(self):
        return bool(self.subjects)

    @property
    def total_subjects(self):
        return len(self.subjects)


def build_summary_from_snapshot(snapshot, student_id, metric=RankingMetric.EXAM_DOUBLED,
                                school_name='', rankings=None):
    """
    Build the academic summary for one student of a roster snapshot.

    Args:
        snapshot: ClassRosterSnapshot containing the student and their peers
        student_id: The student to summarise
        metric: Ranking basis, EXAM_DOUBLED for notifications or AVERAGE
            for report cards
        school_name: Optional school label for rendering
        rankings: Precomputed rankings for the same snapshot and metric,
            to avoid re-ranking when summarising a whole class

    Returns:
        AcademicSummary; ``has_data`` is False when the student has no entries
    """
    student = snapshot.get_student(student_id)
    if student is None:
        raise ValueError(f"Student {student_id} is not part of the {snapshot.class_name} roster snapshot")

    if rankings is None:
        rankings = rank_aggregates(snapshot.aggregates(), metric)

    aggregate = snapshot.aggregate_for(student_id)
    place = position_for(rankings, student_id)

    actual_grade = None
    message = ''
    if aggregate.has_data:
        actual_grade = classify(aggregate.overall_average, GradingScheme.SIX_BAND)
        message = performance_message(aggregate.overall_average)

    return AcademicSummary(
        student_id=student_id,
        student_name=student.full_name,
        class_name=snapshot.class_name,
        term=snapshot.term,
        academic_year=snapshot.year,
        subjects=list(aggregate.subjects),
        total_exam_score=aggregate.total_exam_score,
        total_exam_score_doubled=aggregate.total_exam_score_doubled,
        overall_average=aggregate.overall_average,
        overall_grade=aggregate.overall_grade,
        actual_grade=actual_grade,
        position=place.position,
        class_size=place.class_size,
        ranked=place.ranked,
        ranking_metric=RankingMetric(metric),
        performance_message=message,
        guardian_name=student.guardian_name or '',
        guardian_phone=student.guardian_phone or '',
        school_name=school_name,
    )


def summarize_snapshot(snapshot, metric=RankingMetric.EXAM_DOUBLED, school_name=''):
    """Summaries for every roster member, ranked once against the same snapshot."""
    rankings = rank_aggregates(snapshot.aggregates(), metric)
    return [
        build_summary_from_snapshot(
            snapshot, student.pk, metric=metric,
            school_name=school_name, rankings=rankings,
        )
        for student in snapshot.students
    ]
