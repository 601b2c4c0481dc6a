from django.test import TestCase

from academics.models import Class
from students.models import Student


class StudentModelTest(TestCase):
    """Tests for Student model."""

    def setUp(self):
        self.class_7a = Class.objects.create(level_number=7, section='A')

    def test_full_name(self):
        student = Student(first_name='Ama', last_name='Mensah', admission_number='ADM001')
        self.assertEqual(student.full_name, 'Ama Mensah')
        student.other_names = 'Serwaa'
        self.assertEqual(student.full_name, 'Ama Serwaa Mensah')

    def test_str(self):
        student = Student.objects.create(first_name='Ama', last_name='Mensah', admission_number='ADM001')
        self.assertEqual(str(student), 'Ama Mensah (ADM001)')

    def test_default_status_active(self):
        student = Student.objects.create(
            first_name='Kofi', last_name='Boateng', admission_number='ADM002', current_class=self.class_7a
        )
        self.assertEqual(student.status, Student.Status.ACTIVE)
        self.assertIn(student, self.class_7a.students.all())

    def test_has_guardian_phone(self):
        student = Student(first_name='Esi', last_name='Owusu', admission_number='ADM003')
        self.assertFalse(student.has_guardian_phone)
        student.guardian_phone = '   '
        self.assertFalse(student.has_guardian_phone)
        student.guardian_phone = '0241234567'
        self.assertTrue(student.has_guardian_phone)
