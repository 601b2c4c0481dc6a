from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone

from core.choices import FINAL_TERM, TermChoice
from core.models import SchoolSettings


class SchoolSettingsTests(TestCase):
    """Tests for the SchoolSettings singleton."""

    def setUp(self):
        cache.clear()

    def test_load_creates_singleton(self):
        school = SchoolSettings.load()
        self.assertEqual(school.pk, 1)
        self.assertEqual(SchoolSettings.objects.count(), 1)

    def test_defaults(self):
        school = SchoolSettings.load()
        self.assertEqual(school.current_term, TermChoice.TERM_1)
        self.assertEqual(school.current_year, str(timezone.now().year))
        self.assertEqual(school.min_average_for_promotion, 50)
        self.assertEqual(school.min_subjects_to_pass, 5)
        self.assertEqual(school.total_subjects, 8)
        self.assertFalse(school.sms_enabled)

    def test_save_forces_single_row(self):
        SchoolSettings.objects.create(display_name='First')
        SchoolSettings(display_name='Second').save()
        self.assertEqual(SchoolSettings.objects.count(), 1)
        self.assertEqual(SchoolSettings.objects.get().display_name, 'Second')

    def test_save_invalidates_cache(self):
        school = SchoolSettings.load()
        school.current_term = TermChoice.TERM_3
        school.save()
        self.assertEqual(SchoolSettings.load().current_term, TermChoice.TERM_3)


class ChoicesTests(TestCase):

    def test_final_term(self):
        self.assertEqual(FINAL_TERM, 'Term 3')
        self.assertEqual(TermChoice.values, ['Term 1', 'Term 2', 'Term 3'])
