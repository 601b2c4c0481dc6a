"""
Record-store reads and the scoring operations built on them.

All reads for a ranking go through take_roster_snapshot(), which fetches the
class members and their entries back to back inside one transaction, both
selected by the same class and status filter. Nothing here writes score data.
"""
import logging
from collections import defaultdict

from django.db import transaction

from academics.models import Subject
from core.choices import FINAL_TERM
from core.models import SchoolSettings
from students.models import Student
from .models import ScoreEntry
from .promotion import PromotionCriteria, classify_promotion as classify_aggregate, promotion_statistics
from .ranking import ClassRosterSnapshot, RankingMetric, rank_snapshot
from .summary import build_summary_from_snapshot, summarize_snapshot

logger = logging.getLogger(__name__)


# ============ Record store reads ============

def get_score_entries(term, year, student=None, class_=None):
    """Score entries for a period, optionally narrowed to a student or class."""
    entries = ScoreEntry.objects.filter(term=term, year=year)
    if student is not None:
        entries = entries.filter(student=student)
    if class_ is not None:
        entries = entries.filter(student__current_class=class_)
    return entries.order_by('created_at', 'id')


def get_students(class_=None):
    """Active students, optionally limited to one class."""
    students = Student.objects.filter(status=Student.Status.ACTIVE)
    if class_ is not None:
        students = students.filter(current_class=class_)
    return students.select_related('current_class').order_by('pk')


def get_subjects():
    return Subject.objects.all()


def get_subject_names():
    """Mapping of subject id to name, keyed by the canonical subject id."""
    return dict(get_subjects().values_list('id', 'name'))


def get_promotion_criteria():
    return PromotionCriteria.from_settings(SchoolSettings.load())


def get_current_period():
    """(term, year) labels currently active for the school."""
    school = SchoolSettings.load()
    return school.current_term, school.current_year


def _resolve_period(term, year):
    if term is None or year is None:
        current_term, current_year = get_current_period()
        term = term or current_term
        year = year or current_year
    return term, year


# ============ Snapshots ============

def take_roster_snapshot(class_, term, year):
    """
    Read a class roster and all of its score entries for one period.

    The roster and the entries are read back to back inside one transaction,
    and the entries are selected by the same class and status filter as the
    roster. This narrows the window for concurrent changes but is not a
    point-in-time read under READ COMMITTED; entries of students who joined
    the class in between are ignored and departed students get no entries.

    Args:
        class_: Class instance
        term: Term label
        year: Academic year label

    Returns:
        ClassRosterSnapshot with students in roster (primary key) order
    """
    with transaction.atomic():
        students = list(get_students(class_))
        entries = defaultdict(list)
        for entry in get_score_entries(term, year, class_=class_).filter(
            student__status=Student.Status.ACTIVE,
        ):
            entries[entry.student_id].append(entry)
        subject_names = get_subject_names()

    logger.debug(
        f"Snapshot of {class_.name} for {term} {year}: "
        f"{len(students)} students, {sum(len(e) for e in entries.values())} entries"
    )

    return ClassRosterSnapshot(
        class_name=class_.name,
        term=term,
        year=year,
        students=students,
        entries=dict(entries),
        subject_names=subject_names,
    )


def take_single_snapshot(student, term, year):
    """Single-member snapshot for a student outside any active roster."""
    with transaction.atomic():
        entries = list(get_score_entries(term, year, student=student))
        subject_names = get_subject_names()

    return ClassRosterSnapshot(
        class_name=student.current_class.name if student.current_class_id else '',
        term=term,
        year=year,
        students=[student],
        entries={student.pk: entries},
        subject_names=subject_names,
    )


def take_student_snapshot(student, term, year):
    """
    Snapshot for a student's own class, or a single-member snapshot when
    the student is not on an active class roster.

    The Student instance may be stale: if the roster read from the database
    no longer contains the student, the single-member snapshot is used.
    """
    if student.current_class_id and student.status == Student.Status.ACTIVE:
        snapshot = take_roster_snapshot(student.current_class, term, year)
        if snapshot.get_student(student.pk) is not None:
            return snapshot
        logger.info(
            f"{student} is no longer on the {snapshot.class_name} roster; "
            f"summarising without class position"
        )

    return take_single_snapshot(student, term, year)


# ============ Scoring operations ============

def compute_aggregate(student, term, year):
    """StudentAggregate for one student and period."""
    entries = list(get_score_entries(term, year, student=student))
    snapshot = ClassRosterSnapshot(
        class_name='',
        term=term,
        year=year,
        students=[student],
        entries={student.pk: entries},
        subject_names=get_subject_names(),
    )
    return snapshot.aggregate_for(student.pk)


def compute_ranking(class_, term, year, metric=RankingMetric.AVERAGE):
    """
    Positions for a class in one period.

    Returns:
        dict: {student_id: ClassPosition}; students without entries are absent
    """
    snapshot = take_roster_snapshot(class_, term, year)
    return rank_snapshot(snapshot, metric)


def classify_promotion(student, term, year, criteria=None):
    """PromotionResult for one student; promotion decisions normally use Term 3."""
    if criteria is None:
        criteria = get_promotion_criteria()
    aggregate = compute_aggregate(student, term, year)
    return classify_aggregate(aggregate, criteria)


def classify_class_promotions(class_, year, term=FINAL_TERM, criteria=None):
    """
    Promotion results for every active student of a class.

    Returns:
        dict: {'results': [PromotionResult], 'statistics': dict, 'next_class': str}
    """
    if criteria is None:
        criteria = get_promotion_criteria()
    criteria.validate()

    snapshot = take_roster_snapshot(class_, term, year)
    results = [classify_aggregate(aggregate, criteria) for aggregate in snapshot.aggregates()]

    stats = promotion_statistics(results)
    logger.info(
        f"Promotion for {class_.name} ({term} {year}): "
        f"{stats['promote']} promote, {stats['review']} review, "
        f"{stats['retain']} retain, {stats['no-scores']} without scores"
    )

    return {
        'results': results,
        'statistics': stats,
        'next_class': class_.next_class_name(),
    }


def build_summary(student, term=None, year=None, metric=RankingMetric.EXAM_DOUBLED):
    """
    AcademicSummary for one student.

    Term and year default to the school's current period. The ranking basis
    defaults to the notification convention (exam total doubled); pass
    RankingMetric.AVERAGE for report cards.
    """
    term, year = _resolve_period(term, year)
    snapshot = take_student_snapshot(student, term, year)
    return build_summary_from_snapshot(
        snapshot, student.pk, metric=metric,
        school_name=SchoolSettings.load().display_name,
    )


def build_class_summaries(class_, term=None, year=None, metric=RankingMetric.EXAM_DOUBLED):
    """AcademicSummary for every active student of a class, from one snapshot."""
    term, year = _resolve_period(term, year)
    snapshot = take_roster_snapshot(class_, term, year)
    return summarize_snapshot(
        snapshot, metric=metric,
        school_name=SchoolSettings.load().display_name,
    )
