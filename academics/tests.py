from django.db import IntegrityError
from django.test import TestCase

from academics.models import Class, Subject


class ClassModelTest(TestCase):
    """Tests for Class model."""

    def test_name_generated(self):
        """Test class name is built from level and section."""
        class_ = Class.objects.create(level_number=7, section='a')
        self.assertEqual(class_.name, 'B.S.7A')
        self.assertEqual(class_.section, 'A')
        self.assertEqual(str(class_), 'B.S.7A')

    def test_next_class_name(self):
        self.assertEqual(Class(level_number=7, section='B').next_class_name(), 'B.S.8B')
        self.assertEqual(Class(level_number=8, section='c').next_class_name(), 'B.S.9C')

    def test_final_level_graduates(self):
        class_ = Class(level_number=9, section='A')
        self.assertTrue(class_.is_final_level)
        self.assertEqual(class_.next_class_name(), 'Graduate')

    def test_unique_level_section(self):
        Class.objects.create(level_number=8, section='A')
        with self.assertRaises(IntegrityError):
            Class.objects.create(level_number=8, section='a')


class SubjectModelTest(TestCase):
    """Tests for Subject model."""

    def test_ordering_core_first(self):
        Subject.objects.create(name='French', code='FRE', is_core=False)
        Subject.objects.create(name='Mathematics', code='MATH')
        Subject.objects.create(name='English Language', code='ENG')
        self.assertEqual(
            list(Subject.objects.values_list('name', flat=True)),
            ['English Language', 'Mathematics', 'French'],
        )
