"""
Utility functions for the gradebook app.
Display helpers, score statistics and transcript assembly.
"""
import logging
from collections import defaultdict
from decimal import Decimal

from core.choices import TermChoice
from .aggregation import aggregate_scores, round_half_up
from .grading import GradingScheme, classify

logger = logging.getLogger(__name__)

TERM_ORDER = {term.value: index for index, term in enumerate(TermChoice)}


def ordinal_position(position):
    """Return 1st, 2nd, 3rd, 4th ... with 11th-13th handled."""
    last_digit = position % 10
    last_two = position % 100
    if last_digit == 1 and last_two != 11:
        return f"{position}st"
    if last_digit == 2 and last_two != 12:
        return f"{position}nd"
    if last_digit == 3 and last_two != 13:
        return f"{position}rd"
    return f"{position}th"


def format_position(position, class_size):
    return f"{ordinal_position(position)} out of {class_size}"


def format_score(value):
    """Render a score without trailing zeros (79.00 -> '79', 38.50 -> '38.5')."""
    value = Decimal(str(value))
    if value == value.to_integral_value():
        return str(int(value))
    return str(value.normalize())


def score_statistics(entries):
    """
    Summary statistics for a set of score entries.

    Args:
        entries: Score entries with class_score and exam_score

    Returns:
        dict: {
            'total_scores': int,
            'average_score': int (rounded mean total, 0 when empty),
            'grade_distribution': {'A': int, 'B': int, 'C': int, 'D': int},
            'pass_rate': int (percentage of A-C grades, 0 when empty)
        }
    """
    totals = [Decimal(str(e.class_score)) + Decimal(str(e.exam_score)) for e in entries]
    distribution = {'A': 0, 'B': 0, 'C': 0, 'D': 0}
    for total in totals:
        distribution[classify(total, GradingScheme.FOUR_BAND)] += 1

    count = len(totals)
    if count == 0:
        return {
            'total_scores': 0,
            'average_score': 0,
            'grade_distribution': distribution,
            'pass_rate': 0,
        }

    passing = distribution['A'] + distribution['B'] + distribution['C']
    return {
        'total_scores': count,
        'average_score': round_half_up(sum(totals) / count),
        'grade_distribution': distribution,
        'pass_rate': round_half_up(Decimal(passing) * 100 / count),
    }


def period_sort_key(period):
    year, term = period
    return (year, TERM_ORDER.get(term, len(TERM_ORDER)))


def get_transcript_data(student):
    """
    Fetch a student's score entries grouped by period.

    Args:
        student: The Student instance

    Returns:
        tuple: (entries_by_period dict keyed by (year, term), subject_names dict)
    """
    from .models import ScoreEntry
    from .services import get_subject_names

    entries_by_period = defaultdict(list)
    for entry in ScoreEntry.objects.filter(student=student).order_by('created_at', 'id'):
        entries_by_period[(entry.year, entry.term)].append(entry)

    return dict(entries_by_period), get_subject_names()


def build_academic_history(student_id, entries_by_period, subject_names):
    """
    Build academic history and calculate cumulative statistics.

    Args:
        student_id: The student the entries belong to
        entries_by_period: Dictionary mapping (year, term) to score entries
        subject_names: Mapping of subject id to name

    Returns:
        dict: {
            'academic_history': list of StudentAggregate, oldest first,
            'cumulative_average': int,
            'term_count': int,
            'total_subjects_taken': int,
            'unique_subjects': set of subject names
        }
    """
    academic_history = []
    unique_subjects = set()
    total_subjects_taken = 0

    for year, term in sorted(entries_by_period, key=period_sort_key):
        aggregate = aggregate_scores(
            student_id, term, year, entries_by_period[(year, term)], subject_names
        )
        if not aggregate.has_data:
            continue
        academic_history.append(aggregate)
        total_subjects_taken += aggregate.subjects_taken
        unique_subjects.update(s.subject_name for s in aggregate.subjects)

    term_count = len(academic_history)
    cumulative_average = 0
    if term_count:
        cumulative_average = round_half_up(
            Decimal(sum(a.overall_average for a in academic_history)) / term_count
        )

    return {
        'academic_history': academic_history,
        'cumulative_average': cumulative_average,
        'term_count': term_count,
        'total_subjects_taken': total_subjects_taken,
        'unique_subjects': unique_subjects,
    }


def build_transcript(student):
    """Full transcript for a student across every term with entries."""
    entries_by_period, subject_names = get_transcript_data(student)
    history = build_academic_history(student.pk, entries_by_period, subject_names)
    history['student'] = student
    if history['term_count']:
        history['cumulative_grade'] = classify(history['cumulative_average'], GradingScheme.FOUR_BAND)
    else:
        history['cumulative_grade'] = None
    logger.debug(f"Transcript for {student}: {history['term_count']} terms")
    return history
