"""
Per-student aggregation of subject score entries for one term/year.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from . import config
from .grading import GradingScheme, classify

logger = logging.getLogger(__name__)


def round_half_up(value):
    """Round to the nearest integer, halves away from zero (76.5 -> 77)."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class SubjectSummary:
    subject_id: Optional[int]
    subject_name: str
    class_score: Decimal
    exam_score: Decimal
    total_score: Decimal
    grade: str


@dataclass(frozen=True)
class StudentAggregate:
    """
    A student's combined performance for one term/year.

    An aggregate built from no entries has ``has_data`` False, an average of
    0 and no grade. Callers must check ``has_data`` before presenting it.
    """
    student_id: int
    term: str
    year: str
    subjects: List[SubjectSummary] = field(default_factory=list)
    total_exam_score: Decimal = Decimal('0')
    overall_average: int = 0
    overall_grade: Optional[str] = None

    @property
    def has_data(self):
        return bool(self.subjects)

    @property
    def subjects_taken(self):
        return len(self.subjects)

    @property
    def total_exam_score_doubled(self):
        return self.total_exam_score * 2

    @property
    def total_marks(self):
        return sum((s.total_score for s in self.subjects), Decimal('0'))


def summarize_entry(entry, subject_names):
    """Build the SubjectSummary for a single score entry."""
    class_score = Decimal(str(entry.class_score))
    exam_score = Decimal(str(entry.exam_score))
    total_score = class_score + exam_score
    subject_name = subject_names.get(entry.subject_id)
    if subject_name is None:
        subject_name = config.UNKNOWN_SUBJECT_LABEL

    return SubjectSummary(
        subject_id=entry.subject_id,
        subject_name=subject_name,
        class_score=class_score,
        exam_score=exam_score,
        total_score=total_score,
        grade=classify(total_score, GradingScheme.FOUR_BAND),
    )


def aggregate_scores(student_id, term, year, entries, subject_names):
    """
    Combine a student's score entries for one term/year.

    Args:
        student_id: The student the entries belong to
        term: Term label (e.g. 'Term 1')
        year: Academic year label (e.g. '2024')
        entries: Score entries with subject_id, class_score and exam_score,
            already filtered to this student and period
        subject_names: Mapping of subject_id to subject name

    Returns:
        StudentAggregate with subjects in entry order
    """
    subjects = [summarize_entry(entry, subject_names) for entry in entries]

    if not subjects:
        logger.debug(f"No score entries for student {student_id} in {term} {year}")
        return StudentAggregate(student_id=student_id, term=term, year=year)

    total_exam_score = sum((s.exam_score for s in subjects), Decimal('0'))
    total_marks = sum((s.total_score for s in subjects), Decimal('0'))
    overall_average = round_half_up(total_marks / len(subjects))

    return StudentAggregate(
        student_id=student_id,
        term=term,
        year=year,
        subjects=subjects,
        total_exam_score=total_exam_score,
        overall_average=overall_average,
        overall_grade=classify(overall_average, GradingScheme.FOUR_BAND),
    )
