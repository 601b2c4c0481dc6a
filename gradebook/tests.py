from decimal import Decimal
from types import SimpleNamespace

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase, override_settings

from academics.models import Class, Subject
from core.models import SchoolSettings
from students.models import Student
from . import services
from .aggregation import aggregate_scores, round_half_up
from .forms import ScoreEntryForm
from .grading import GradingScheme, classify, grade_remark
from .models import ScoreEntry
from .promotion import (
    InvalidPromotionCriteria, PromotionCriteria, PromotionStatus,
    classify_promotion, promotion_statistics,
)
from .ranking import (
    ClassRosterSnapshot, RankingMetric, position_for, rank_aggregates, rank_snapshot,
)
from .summary import build_summary_from_snapshot, performance_message, summarize_snapshot
from .utils import (
    build_academic_history, build_transcript, format_score, ordinal_position, score_statistics,
)


def entry(subject_id, class_score, exam_score):
    return SimpleNamespace(
        subject_id=subject_id,
        class_score=Decimal(str(class_score)),
        exam_score=Decimal(str(exam_score)),
    )


def entries_for_totals(totals):
    """Entries whose totals are the given values (class score filled first)."""
    return [entry(i, min(t, 50), t - min(t, 50)) for i, t in enumerate(totals, 1)]


def fake_student(pk, name='Student', guardian_phone='0241234567'):
    return SimpleNamespace(
        pk=pk, full_name=name, guardian_name='Guardian', guardian_phone=guardian_phone,
    )


SUBJECT_NAMES = {1: 'Mathematics', 2: 'English Language', 3: 'Integrated Science', 4: 'Social Studies'}


class ClassifyTest(SimpleTestCase):
    """Tests for the two grading schemes."""

    def test_four_band_boundaries(self):
        """Test four-band thresholds at and around each boundary."""
        expected = {100: 'A', 80: 'A', 79: 'B', 70: 'B', 69: 'C', 60: 'C', 59: 'D', 0: 'D'}
        for score, grade in expected.items():
            self.assertEqual(classify(score), grade, score)

    def test_six_band_boundaries(self):
        """Test six-band thresholds."""
        expected = {95: 'A+', 90: 'A+', 85: 'A', 75: 'B+', 65: 'B', 55: 'C', 50: 'C', 49: 'F', 10: 'F'}
        for score, grade in expected.items():
            self.assertEqual(classify(score, GradingScheme.SIX_BAND), grade, score)

    def test_decimal_scores(self):
        self.assertEqual(classify(Decimal('79.99')), 'B')
        self.assertEqual(classify(Decimal('89.5'), GradingScheme.SIX_BAND), 'A')

    def test_scheme_by_value(self):
        self.assertEqual(classify(72, 'six_band'), 'B+')

    def test_unknown_scheme(self):
        with self.assertRaises(ValueError):
            classify(50, 'seven_band')

    def test_grade_remark(self):
        self.assertEqual(grade_remark('A'), 'Excellent')
        self.assertEqual(grade_remark('D'), 'Needs Improvement')
        self.assertEqual(grade_remark(None), 'No Grade')


class AggregationTest(SimpleTestCase):
    """Tests for per-student aggregation."""

    def setUp(self):
        self.entries = [entry(1, 38, 41), entry(2, 34, 36), entry(3, 42, 41), entry(4, 37, 37)]

    def test_average_rounds_half_up(self):
        """Totals 79, 70, 83 and 74 average 76.5, which rounds to 77."""
        aggregate = aggregate_scores(1, 'Term 1', '2024', self.entries, SUBJECT_NAMES)
        self.assertEqual([s.total_score for s in aggregate.subjects], [79, 70, 83, 74])
        self.assertEqual(aggregate.overall_average, 77)
        self.assertEqual(aggregate.overall_grade, 'B')

    def test_total_exam_score_doubled(self):
        aggregate = aggregate_scores(1, 'Term 1', '2024', self.entries, SUBJECT_NAMES)
        self.assertEqual(aggregate.total_exam_score, 155)
        self.assertEqual(aggregate.total_exam_score_doubled, 310)

    def test_subjects_keep_entry_order(self):
        aggregate = aggregate_scores(1, 'Term 1', '2024', list(reversed(self.entries)), SUBJECT_NAMES)
        self.assertEqual(
            [s.subject_name for s in aggregate.subjects],
            ['Social Studies', 'Integrated Science', 'English Language', 'Mathematics'],
        )

    def test_subject_grades_use_four_band(self):
        aggregate = aggregate_scores(1, 'Term 1', '2024', self.entries, SUBJECT_NAMES)
        self.assertEqual([s.grade for s in aggregate.subjects], ['B', 'B', 'A', 'B'])

    def test_no_entries_is_no_data(self):
        """An empty aggregate is flagged rather than graded as a zero."""
        aggregate = aggregate_scores(1, 'Term 1', '2024', [], SUBJECT_NAMES)
        self.assertFalse(aggregate.has_data)
        self.assertEqual(aggregate.overall_average, 0)
        self.assertIsNone(aggregate.overall_grade)
        self.assertEqual(aggregate.total_exam_score, 0)

    def test_unknown_subject_label(self):
        aggregate = aggregate_scores(1, 'Term 1', '2024', [entry(99, 20, 20), entry(None, 10, 10)], SUBJECT_NAMES)
        self.assertEqual([s.subject_name for s in aggregate.subjects], ['Unknown Subject', 'Unknown Subject'])

    @override_settings(GRADEBOOK_UNKNOWN_SUBJECT_LABEL='Removed Subject')
    def test_unknown_subject_label_setting(self):
        aggregate = aggregate_scores(1, 'Term 1', '2024', [entry(99, 20, 20)], SUBJECT_NAMES)
        self.assertEqual(aggregate.subjects[0].subject_name, 'Removed Subject')

    def test_idempotent(self):
        first = aggregate_scores(1, 'Term 1', '2024', self.entries, SUBJECT_NAMES)
        second = aggregate_scores(1, 'Term 1', '2024', self.entries, SUBJECT_NAMES)
        self.assertEqual(first, second)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(Decimal('76.5')), 77)
        self.assertEqual(round_half_up(Decimal('72.5')), 73)
        self.assertEqual(round_half_up(Decimal('76.49')), 76)


class RankingTest(SimpleTestCase):
    """Tests for class ranking."""

    def make_snapshot(self, entries):
        return ClassRosterSnapshot(
            class_name='B.S.7A',
            term='Term 1',
            year='2024',
            students=[fake_student(pk) for pk in sorted(entries)],
            entries=entries,
            subject_names=SUBJECT_NAMES,
        )

    def test_rank_by_average(self):
        snapshot = self.make_snapshot({
            1: entries_for_totals([60, 70]),
            2: entries_for_totals([90, 90]),
            3: entries_for_totals([75, 75]),
        })
        rankings = rank_snapshot(snapshot, RankingMetric.AVERAGE)
        self.assertEqual(rankings[2].position, 1)
        self.assertEqual(rankings[3].position, 2)
        self.assertEqual(rankings[1].position, 3)
        self.assertEqual({p.class_size for p in rankings.values()}, {3})

    def test_metrics_are_distinct(self):
        """A strong class score wins on average, a strong exam wins on exam total."""
        snapshot = self.make_snapshot({
            1: [entry(1, 50, 20)],
            2: [entry(1, 20, 45)],
        })
        by_average = rank_snapshot(snapshot, RankingMetric.AVERAGE)
        by_exam = rank_snapshot(snapshot, RankingMetric.EXAM_DOUBLED)
        self.assertEqual(by_average[1].position, 1)
        self.assertEqual(by_exam[2].position, 1)

    def test_ties_keep_roster_order(self):
        snapshot = self.make_snapshot({
            1: entries_for_totals([80]),
            2: entries_for_totals([90]),
            3: entries_for_totals([80]),
        })
        rankings = rank_snapshot(snapshot)
        self.assertEqual([rankings[pk].position for pk in (2, 1, 3)], [1, 2, 3])

    def test_students_without_entries_not_ranked(self):
        snapshot = self.make_snapshot({1: entries_for_totals([70]), 2: [], 3: entries_for_totals([50])})
        rankings = rank_snapshot(snapshot)
        self.assertNotIn(2, rankings)
        self.assertEqual(rankings[1].class_size, 2)

    def test_position_fallback(self):
        snapshot = self.make_snapshot({1: entries_for_totals([70]), 2: []})
        place = position_for(rank_snapshot(snapshot), 2)
        self.assertEqual(place.position, 1)
        self.assertEqual(place.class_size, 1)
        self.assertFalse(place.ranked)

    def test_positions_are_contiguous(self):
        snapshot = self.make_snapshot({pk: entries_for_totals([pk * 10]) for pk in range(1, 8)})
        rankings = rank_snapshot(snapshot)
        self.assertEqual(sorted(p.position for p in rankings.values()), list(range(1, 8)))
        self.assertEqual(rankings[7].position, 1)

    def test_unknown_metric(self):
        with self.assertRaises(ValueError):
            rank_aggregates([], 'median')


class PromotionTest(SimpleTestCase):
    """Tests for promotion classification."""

    def setUp(self):
        self.criteria = PromotionCriteria(minimum_average=50, minimum_subjects_passed=5, total_subjects=8)

    def classify(self, totals):
        aggregate = aggregate_scores(1, 'Term 3', '2024', entries_for_totals(totals), {})
        return classify_promotion(aggregate, self.criteria)

    def test_promote(self):
        """Average 55 with six subjects passed is promoted."""
        result = self.classify([60, 60, 60, 60, 60, 60, 40, 40])
        self.assertEqual(result.overall_average, 55)
        self.assertEqual(result.passed_subjects, 6)
        self.assertEqual(result.status, PromotionStatus.PROMOTE)

    def test_review(self):
        """Average 42 with three subjects passed meets the review floor."""
        result = self.classify([50, 50, 50, 38, 38, 38, 36, 36])
        self.assertEqual(result.overall_average, 42)
        self.assertEqual(result.passed_subjects, 3)
        self.assertEqual(result.status, PromotionStatus.REVIEW)

    def test_retain(self):
        """Average 35 with two subjects passed is retained."""
        result = self.classify([50, 50, 30, 30, 30, 30, 30, 30])
        self.assertEqual(result.overall_average, 35)
        self.assertEqual(result.passed_subjects, 2)
        self.assertEqual(result.status, PromotionStatus.RETAIN)

    def test_good_average_too_few_passes(self):
        result = self.classify([100, 100, 20, 20])
        self.assertEqual(result.overall_average, 60)
        self.assertEqual(result.status, PromotionStatus.RETAIN)

    def test_review_floor_is_fixed(self):
        """Raising the configured criteria does not move the review floor."""
        self.criteria = PromotionCriteria(minimum_average=90, minimum_subjects_passed=8, total_subjects=8)
        result = self.classify([60, 60, 60, 60, 60, 60, 40, 40])
        self.assertEqual(result.status, PromotionStatus.REVIEW)

    def test_review_floor_boundary(self):
        """An average of exactly 40 with exactly three passes is reviewed."""
        result = self.classify([50, 50, 50, 10])
        self.assertEqual(result.overall_average, 40)
        self.assertEqual(result.passed_subjects, 3)
        self.assertEqual(result.status, PromotionStatus.REVIEW)

    def test_just_below_review_floor(self):
        result = self.classify([50, 50, 50, 6])
        self.assertEqual(result.overall_average, 39)
        self.assertEqual(result.status, PromotionStatus.RETAIN)

    def test_promotion_boundary(self):
        """Meeting both configured minimums exactly is promoted."""
        result = self.classify([50, 50, 50, 50, 50])
        self.assertEqual(result.overall_average, 50)
        self.assertEqual(result.passed_subjects, 5)
        self.assertEqual(result.status, PromotionStatus.PROMOTE)

    def test_passed_subjects_boundary(self):
        result = self.classify([50, 50, 50, 50, 49, 51])
        self.assertEqual(result.passed_subjects, 5)
        self.assertEqual(result.status, PromotionStatus.PROMOTE)
        result = self.classify([50, 50, 50, 50, 49])
        self.assertEqual(result.passed_subjects, 4)
        self.assertEqual(result.status, PromotionStatus.REVIEW)

    def test_no_scores(self):
        result = self.classify([])
        self.assertEqual(result.status, PromotionStatus.NO_SCORES)
        self.assertEqual(result.subjects_taken, 0)

    def test_subject_breakdown(self):
        result = self.classify([50, 49])
        self.assertEqual([s.passed for s in result.subjects], [True, False])

    def test_invalid_criteria(self):
        for criteria in (
            PromotionCriteria(minimum_average=-1),
            PromotionCriteria(minimum_average=101),
            PromotionCriteria(minimum_subjects_passed=-1),
            PromotionCriteria(minimum_subjects_passed=9, total_subjects=8),
            PromotionCriteria(total_subjects=0),
        ):
            with self.assertRaises(InvalidPromotionCriteria):
                classify_promotion(aggregate_scores(1, 'Term 3', '2024', [], {}), criteria)

    def test_invalid_criteria_is_value_error(self):
        with self.assertRaises(ValueError):
            PromotionCriteria(minimum_average=-5).validate()

    def test_statistics(self):
        results = [
            self.classify([60, 60, 60, 60, 60]),
            self.classify([50, 50, 50, 38]),
            self.classify([]),
        ]
        stats = promotion_statistics(results)
        self.assertEqual(stats['total'], 3)
        self.assertEqual(stats['promote'], 1)
        self.assertEqual(stats['review'], 1)
        self.assertEqual(stats['retain'], 0)
        self.assertEqual(stats['no-scores'], 1)


class SummaryTest(SimpleTestCase):
    """Tests for academic summaries built from a snapshot."""

    def setUp(self):
        self.snapshot = ClassRosterSnapshot(
            class_name='B.S.7A',
            term='Term 1',
            year='2024',
            students=[fake_student(1, 'Ama Mensah'), fake_student(2, 'Kofi Boateng'), fake_student(3, 'Esi Owusu', '')],
            entries={
                1: [entry(1, 38, 41), entry(2, 34, 36), entry(3, 42, 41), entry(4, 37, 37)],
                2: [entry(1, 45, 48), entry(2, 44, 46)],
            },
            subject_names=SUBJECT_NAMES,
        )

    def test_summary_fields(self):
        summary = build_summary_from_snapshot(self.snapshot, 1)
        self.assertTrue(summary.has_data)
        self.assertEqual(summary.student_name, 'Ama Mensah')
        self.assertEqual(summary.total_subjects, 4)
        self.assertEqual(summary.overall_average, 77)
        self.assertEqual(summary.overall_grade, 'B')
        self.assertEqual(summary.actual_grade, 'B+')
        self.assertEqual(summary.total_exam_score_doubled, 310)
        self.assertEqual(summary.guardian_phone, '0241234567')
        self.assertEqual(summary.performance_message, performance_message(77))

    def test_default_metric_is_exam_doubled(self):
        """Ama's exam total (155) beats Kofi's (94) even though Kofi's average is higher."""
        summary = build_summary_from_snapshot(self.snapshot, 1)
        self.assertEqual((summary.position, summary.class_size), (1, 2))
        summary = build_summary_from_snapshot(self.snapshot, 1, metric=RankingMetric.AVERAGE)
        self.assertEqual((summary.position, summary.class_size), (2, 2))

    def test_no_data_summary(self):
        summary = build_summary_from_snapshot(self.snapshot, 3)
        self.assertFalse(summary.has_data)
        self.assertFalse(summary.ranked)
        self.assertEqual(summary.position, 1)
        self.assertIsNone(summary.actual_grade)
        self.assertEqual(summary.performance_message, '')

    def test_student_not_in_snapshot(self):
        with self.assertRaises(ValueError):
            build_summary_from_snapshot(self.snapshot, 42)

    def test_summarize_snapshot(self):
        summaries = summarize_snapshot(self.snapshot, school_name='Offinso JHS')
        self.assertEqual([s.student_id for s in summaries], [1, 2, 3])
        self.assertEqual({s.school_name for s in summaries}, {'Offinso JHS'})

    def test_performance_messages(self):
        self.assertIn('excellently', performance_message(90))
        self.assertIn('very well', performance_message(89))
        self.assertIn('urgent attention', performance_message(0))


class UtilsTest(SimpleTestCase):
    """Tests for display helpers and statistics."""

    def test_ordinal_position(self):
        expected = {1: '1st', 2: '2nd', 3: '3rd', 4: '4th', 11: '11th', 12: '12th',
                    13: '13th', 21: '21st', 22: '22nd', 101: '101st', 111: '111th'}
        for position, text in expected.items():
            self.assertEqual(ordinal_position(position), text)

    def test_format_score(self):
        self.assertEqual(format_score(Decimal('79.00')), '79')
        self.assertEqual(format_score(Decimal('38.50')), '38.5')
        self.assertEqual(format_score(Decimal('310.00')), '310')
        self.assertEqual(format_score(77), '77')

    def test_score_statistics(self):
        stats = score_statistics(entries_for_totals([85, 72, 65, 40]))
        self.assertEqual(stats['total_scores'], 4)
        self.assertEqual(stats['average_score'], 66)
        self.assertEqual(stats['grade_distribution'], {'A': 1, 'B': 1, 'C': 1, 'D': 1})
        self.assertEqual(stats['pass_rate'], 75)

    def test_score_statistics_empty(self):
        stats = score_statistics([])
        self.assertEqual(stats['total_scores'], 0)
        self.assertEqual(stats['average_score'], 0)
        self.assertEqual(stats['pass_rate'], 0)

    def test_academic_history_order(self):
        history = build_academic_history(1, {
            ('2024', 'Term 2'): entries_for_totals([60]),
            ('2023', 'Term 3'): entries_for_totals([80]),
            ('2024', 'Term 1'): entries_for_totals([71]),
        }, {})
        periods = [(a.year, a.term) for a in history['academic_history']]
        self.assertEqual(periods, [('2023', 'Term 3'), ('2024', 'Term 1'), ('2024', 'Term 2')])
        self.assertEqual(history['cumulative_average'], 70)
        self.assertEqual(history['term_count'], 3)


class GradebookDataMixin:
    """Shared fixtures: one class with three active students and one inactive."""

    def setUp(self):
        cache.clear()
        self.class_7a = Class.objects.create(level_number=7, section='a')
        self.maths = Subject.objects.create(name='Mathematics', code='MATH')
        self.english = Subject.objects.create(name='English Language', code='ENG')
        self.science = Subject.objects.create(name='Integrated Science', code='SCI')

        self.ama = self.make_student('Ama', 'Mensah', 'ADM001', guardian_phone='0241234567')
        self.kofi = self.make_student('Kofi', 'Boateng', 'ADM002', guardian_phone='0551234567')
        self.esi = self.make_student('Esi', 'Owusu', 'ADM003')
        self.yaw = self.make_student('Yaw', 'Asante', 'ADM004', status=Student.Status.WITHDRAWN)

        self.score(self.ama, self.maths, 38, 41)
        self.score(self.ama, self.english, 34, 36)
        self.score(self.ama, self.science, 42, 41)
        self.score(self.kofi, self.maths, 45, 30)
        self.score(self.kofi, self.english, 44, 30)
        self.score(self.yaw, self.maths, 50, 50)

    def make_student(self, first, last, admission, **kwargs):
        return Student.objects.create(
            first_name=first, last_name=last, admission_number=admission,
            current_class=self.class_7a, guardian_name=f'Parent of {first}', **kwargs
        )

    def score(self, student, subject, class_score, exam_score, term='Term 1', year='2024'):
        return ScoreEntry.objects.create(
            student=student, subject=subject, term=term, year=year,
            class_score=Decimal(str(class_score)), exam_score=Decimal(str(exam_score)),
        )


class ScoreEntryModelTest(GradebookDataMixin, TestCase):
    """Tests for the ScoreEntry model."""

    def test_total_and_grade(self):
        score = ScoreEntry.objects.get(student=self.ama, subject=self.maths)
        self.assertEqual(score.total_score, Decimal('79'))
        self.assertEqual(score.grade, 'B')

    def test_full_clean_rejects_out_of_range(self):
        score = ScoreEntry(student=self.esi, subject=self.maths, term='Term 1', year='2024',
                           class_score=Decimal('51'), exam_score=Decimal('-1'))
        with self.assertRaises(ValidationError) as ctx:
            score.full_clean()
        self.assertIn('class_score', ctx.exception.message_dict)
        self.assertIn('exam_score', ctx.exception.message_dict)

    def test_form_validation(self):
        data = {'student': self.esi.pk, 'subject': self.maths.pk, 'term': 'Term 1',
                'year': '2024', 'class_score': '50.5', 'exam_score': '20'}
        form = ScoreEntryForm(data=data)
        self.assertFalse(form.is_valid())
        self.assertIn('class_score', form.errors)

        data['class_score'] = '-1'
        form = ScoreEntryForm(data=data)
        self.assertFalse(form.is_valid())
        self.assertIn('class_score', form.errors)

        data['class_score'] = '40'
        form = ScoreEntryForm(data=data)
        self.assertTrue(form.is_valid(), form.errors)

    @override_settings(GRADEBOOK_CLASS_SCORE_MAX=60)
    def test_form_range_is_fixed(self):
        """Each component is marked out of 50 and reports a single error."""
        data = {'student': self.esi.pk, 'subject': self.maths.pk, 'term': 'Term 1',
                'year': '2024', 'class_score': '55', 'exam_score': '20'}
        form = ScoreEntryForm(data=data)
        self.assertFalse(form.is_valid())
        self.assertEqual(form.errors['class_score'], ['Ensure this value is less than or equal to 50.'])


class ServicesTest(GradebookDataMixin, TestCase):
    """Tests for the record-store backed operations."""

    def test_compute_aggregate(self):
        aggregate = services.compute_aggregate(self.ama, 'Term 1', '2024')
        self.assertEqual(aggregate.overall_average, 77)
        self.assertEqual([s.subject_name for s in aggregate.subjects],
                         ['Mathematics', 'English Language', 'Integrated Science'])

    def test_compute_aggregate_other_period(self):
        aggregate = services.compute_aggregate(self.ama, 'Term 2', '2024')
        self.assertFalse(aggregate.has_data)

    def test_deleted_subject_label(self):
        self.science.delete()
        aggregate = services.compute_aggregate(self.ama, 'Term 1', '2024')
        self.assertEqual(aggregate.subjects[-1].subject_name, 'Unknown Subject')

    def test_compute_ranking(self):
        """Only active students with entries are ranked."""
        rankings = services.compute_ranking(self.class_7a, 'Term 1', '2024')
        self.assertEqual(set(rankings), {self.ama.pk, self.kofi.pk})
        self.assertEqual(rankings[self.ama.pk].position, 1)
        self.assertEqual(rankings[self.kofi.pk].class_size, 2)

    def test_classify_promotion(self):
        criteria = PromotionCriteria(minimum_average=50, minimum_subjects_passed=3, total_subjects=3)
        result = services.classify_promotion(self.ama, 'Term 1', '2024', criteria)
        self.assertEqual(result.status, PromotionStatus.PROMOTE)

    def test_classify_promotion_uses_school_criteria(self):
        """Three subjects passed is short of the default five, so Ama is reviewed."""
        result = services.classify_promotion(self.ama, 'Term 1', '2024')
        self.assertEqual(result.status, PromotionStatus.REVIEW)

        school = SchoolSettings.load()
        school.min_subjects_to_pass = 3
        school.total_subjects = 3
        school.save()
        result = services.classify_promotion(self.ama, 'Term 1', '2024')
        self.assertEqual(result.status, PromotionStatus.PROMOTE)

    def test_classify_class_promotions(self):
        criteria = PromotionCriteria(minimum_average=50, minimum_subjects_passed=3, total_subjects=3)
        outcome = services.classify_class_promotions(self.class_7a, '2024', term='Term 1', criteria=criteria)
        statuses = {r.student_id: r.status for r in outcome['results']}
        self.assertEqual(statuses[self.ama.pk], PromotionStatus.PROMOTE)
        self.assertEqual(statuses[self.esi.pk], PromotionStatus.NO_SCORES)
        self.assertNotIn(self.yaw.pk, statuses)
        self.assertEqual(outcome['statistics']['total'], 3)
        self.assertEqual(outcome['next_class'], 'B.S.8A')

    def test_classify_class_promotions_invalid_criteria(self):
        with self.assertRaises(InvalidPromotionCriteria):
            services.classify_class_promotions(
                self.class_7a, '2024', criteria=PromotionCriteria(minimum_subjects_passed=-1)
            )

    def test_build_summary(self):
        SchoolSettings.objects.create(display_name='Offinso JHS')
        summary = services.build_summary(self.kofi, 'Term 1', '2024')
        self.assertEqual(summary.class_name, 'B.S.7A')
        self.assertEqual(summary.position, 2)
        self.assertEqual(summary.class_size, 2)
        self.assertEqual(summary.school_name, 'Offinso JHS')
        self.assertEqual(summary.guardian_name, 'Parent of Kofi')

    def test_build_summary_defaults_to_current_period(self):
        SchoolSettings.objects.create(current_term='Term 2', current_year='2024')
        self.score(self.esi, self.maths, 30, 30, term='Term 2')
        summary = services.build_summary(self.esi)
        self.assertEqual(summary.term, 'Term 2')
        self.assertTrue(summary.has_data)
        self.assertEqual((summary.position, summary.class_size), (1, 1))

    def test_build_summary_student_without_class(self):
        loner = Student.objects.create(first_name='Abena', last_name='Ofori', admission_number='ADM009')
        self.score(loner, self.maths, 40, 40)
        summary = services.build_summary(loner, 'Term 1', '2024')
        self.assertEqual(summary.class_name, '')
        self.assertEqual((summary.position, summary.class_size), (1, 1))

    def test_build_summary_stale_student(self):
        """A student withdrawn after being loaded is summarised on their own."""
        kofi = Student.objects.get(pk=self.kofi.pk)
        Student.objects.filter(pk=kofi.pk).update(status=Student.Status.WITHDRAWN)
        summary = services.build_summary(kofi, 'Term 1', '2024')
        self.assertTrue(summary.has_data)
        self.assertEqual(summary.class_name, 'B.S.7A')
        self.assertEqual((summary.position, summary.class_size), (1, 1))

    def test_roster_snapshot_excludes_inactive_entries(self):
        snapshot = services.take_roster_snapshot(self.class_7a, 'Term 1', '2024')
        self.assertEqual(set(snapshot.entries), {self.ama.pk, self.kofi.pk})
        self.assertIsNone(snapshot.get_student(self.yaw.pk))

    def test_build_class_summaries(self):
        summaries = services.build_class_summaries(self.class_7a, 'Term 1', '2024')
        self.assertEqual([s.student_id for s in summaries], [self.ama.pk, self.kofi.pk, self.esi.pk])
        self.assertFalse(summaries[2].has_data)

    def test_transcript(self):
        self.score(self.ama, self.maths, 20, 20, term='Term 3', year='2023')
        transcript = build_transcript(self.ama)
        periods = [(a.year, a.term) for a in transcript['academic_history']]
        self.assertEqual(periods, [('2023', 'Term 3'), ('2024', 'Term 1')])
        self.assertEqual(transcript['cumulative_average'], 59)
        self.assertEqual(transcript['cumulative_grade'], 'D')
