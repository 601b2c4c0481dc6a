from decimal import Decimal
from io import StringIO
from unittest import mock

import requests
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase

from academics.models import Class, Subject
from core.choices import SMSBackend
from core.models import SchoolSettings
from gradebook.aggregation import SubjectSummary
from gradebook.models import ScoreEntry
from gradebook.services import build_class_summaries
from gradebook.summary import AcademicSummary
from students.models import Student
from .messages import (
    EXAM_SUMMARY_TEMPLATE, MESSAGE_PLACEHOLDERS, MESSAGE_TEMPLATES,
    format_subject_line, render_template,
)
from .models import SMSMessage, SMSTemplate
from .tasks import format_phone_ghana, send_communication_task
from .utils import normalize_phone_number, send_exam_summaries, send_sms, validate_phone_number


def make_summary(**kwargs):
    values = {
        'student_id': 1,
        'student_name': 'Ama',
        'class_name': 'B.S.7A',
        'term': 'Term 1',
        'academic_year': '2024',
        'actual_grade': 'B+',
    }
    values.update(kwargs)
    return AcademicSummary(**values)


MATHS = SubjectSummary(
    subject_id=1, subject_name='Mathematics', class_score=Decimal('38.00'),
    exam_score=Decimal('41.00'), total_score=Decimal('79.00'), grade='B',
)
ENGLISH = SubjectSummary(
    subject_id=2, subject_name='English Language', class_score=Decimal('34.50'),
    exam_score=Decimal('36.00'), total_score=Decimal('70.50'), grade='B',
)


class RenderTemplateTest(SimpleTestCase):
    """Tests for placeholder substitution."""

    def test_simple_substitution(self):
        summary = make_summary()
        self.assertEqual(
            render_template('Hello {STUDENT_NAME}, grade {GRADE}', summary),
            'Hello Ama, grade B+',
        )

    def test_unknown_placeholder_left_verbatim(self):
        summary = make_summary()
        self.assertEqual(render_template('{FOO} and {STUDENT_NAME}', summary), '{FOO} and Ama')

    def test_position(self):
        summary = make_summary(position=2, class_size=30)
        self.assertEqual(render_template('{POSITION}', summary), '2nd out of 30')

    def test_exam_total_is_doubled(self):
        summary = make_summary(total_exam_score=Decimal('155.00'), total_exam_score_doubled=Decimal('310.00'))
        self.assertEqual(render_template('{TOTAL_EXAM_SCORE}', summary), '310')

    def test_subjects_breakdown_in_order(self):
        summary = make_summary(subjects=[ENGLISH, MATHS])
        self.assertEqual(
            render_template('{SUBJECTS_BREAKDOWN}', summary),
            'English Language: 70.5% (Class: 34.5, Exam: 36) - Grade B\n'
            'Mathematics: 79% (Class: 38, Exam: 41) - Grade B',
        )
        self.assertEqual(render_template('{TOTAL_SUBJECTS}', summary), '2')

    def test_subject_line(self):
        self.assertEqual(format_subject_line(MATHS), 'Mathematics: 79% (Class: 38, Exam: 41) - Grade B')

    def test_guardian_name_fallback(self):
        summary = make_summary(guardian_name='')
        self.assertEqual(render_template('Dear {GUARDIAN_NAME}', summary), 'Dear Parent/Guardian')

    def test_extra_values(self):
        summary = make_summary()
        message = render_template(MESSAGE_TEMPLATES['ATTENDANCE_ALERT'], summary, extra={'DATE': '12/03/2024'})
        self.assertIn('absent from school today (12/03/2024)', message)

    def test_default_template_fully_rendered(self):
        summary = make_summary(
            guardian_name='Mrs Mensah', subjects=[MATHS], overall_average=79,
            position=1, class_size=12, performance_message='performed well',
            school_name='Offinso JHS',
        )
        message = render_template(EXAM_SUMMARY_TEMPLATE, summary)
        for placeholder in MESSAGE_PLACEHOLDERS:
            self.assertNotIn(placeholder, message)
        self.assertIn('Ama performed well.', message)
        self.assertIn('Average Score: 79%', message)

    def test_no_arithmetic_on_values(self):
        """Rendering only copies summary fields."""
        summary = make_summary(overall_average=77, subjects=[MATHS])
        self.assertEqual(render_template('{AVERAGE_SCORE}', summary), '77')


class PhoneNumberTest(SimpleTestCase):
    """Tests for phone normalisation."""

    def test_normalize(self):
        expected = {
            '0241234567': '+233241234567',
            '024 123 4567': '+233241234567',
            '024-123-4567': '+233241234567',
            '233241234567': '+233241234567',
            '241234567': '+233241234567',
            '+233241234567': '+233241234567',
        }
        for raw, normalized in expected.items():
            self.assertEqual(normalize_phone_number(raw), normalized)

    def test_normalize_empty(self):
        self.assertIsNone(normalize_phone_number(''))
        self.assertIsNone(normalize_phone_number(None))
        self.assertIsNone(normalize_phone_number('  '))

    def test_validate(self):
        self.assertEqual(validate_phone_number('0551234567'), '+233551234567')
        with self.assertRaises(ValidationError):
            validate_phone_number('')
        with self.assertRaises(ValidationError):
            validate_phone_number('not-a-number')

    def test_format_phone_ghana(self):
        self.assertEqual(format_phone_ghana('+233241234567'), '233241234567')
        self.assertEqual(format_phone_ghana('0241234567'), '233241234567')


class CommunicationsDataMixin:

    def setUp(self):
        cache.clear()
        self.class_7a = Class.objects.create(level_number=7, section='A')
        self.maths = Subject.objects.create(name='Mathematics', code='MATH')
        self.ama = Student.objects.create(
            first_name='Ama', last_name='Mensah', admission_number='ADM001',
            current_class=self.class_7a, guardian_name='Mrs Mensah', guardian_phone='0241234567',
        )
        self.kofi = Student.objects.create(
            first_name='Kofi', last_name='Boateng', admission_number='ADM002',
            current_class=self.class_7a, guardian_name='Mr Boateng',
        )
        self.esi = Student.objects.create(
            first_name='Esi', last_name='Owusu', admission_number='ADM003',
            current_class=self.class_7a, guardian_phone='0551234567',
        )
        for student in (self.ama, self.kofi):
            ScoreEntry.objects.create(
                student=student, subject=self.maths, term='Term 1', year='2024',
                class_score=Decimal('40'), exam_score=Decimal('40'),
            )


@mock.patch('communications.tasks.send_communication_task.delay')
class SendSMSTest(CommunicationsDataMixin, TestCase):
    """Tests for queuing messages."""

    def test_send_sms_queues_task(self, mock_delay):
        result = send_sms('0241234567', 'Hello', student=self.ama)
        self.assertTrue(result['success'])
        sms = SMSMessage.objects.get(pk=result['message_id'])
        self.assertEqual(sms.recipient_phone, '+233241234567')
        self.assertEqual(sms.recipient_name, 'Mrs Mensah')
        self.assertEqual(sms.status, SMSMessage.Status.PENDING)
        mock_delay.assert_called_once_with(sms.pk)

    def test_send_sms_invalid_phone(self, mock_delay):
        result = send_sms('', 'Hello')
        self.assertFalse(result['success'])
        self.assertIn('required', result['error'])
        self.assertFalse(SMSMessage.objects.exists())
        mock_delay.assert_not_called()

    def test_send_exam_summaries(self, mock_delay):
        """Students without a phone or without scores are reported, not sent."""
        summaries = build_class_summaries(self.class_7a, 'Term 1', '2024')
        results = send_exam_summaries(summaries)

        self.assertEqual(results['success'], 1)
        self.assertEqual(results['failed'], 2)
        self.assertEqual(len(results['errors']), 2)
        self.assertIn('Kofi Boateng: No guardian phone number', results['errors'])
        self.assertTrue(any(e.startswith('Esi Owusu: No scores') for e in results['errors']))

        sms = SMSMessage.objects.get()
        self.assertEqual(sms.student, self.ama)
        self.assertEqual(sms.message_type, SMSMessage.MessageType.EXAM_SUMMARY)
        self.assertIn('Dear Mrs Mensah', sms.message)
        self.assertIn('Class Position: 1st out of 2', sms.message)
        self.assertEqual(mock_delay.call_count, 1)

    def test_send_exam_summaries_custom_template(self, mock_delay):
        summaries = build_class_summaries(self.class_7a, 'Term 1', '2024')
        send_exam_summaries(summaries, template='{STUDENT_NAME}: {GRADE}')
        self.assertEqual(SMSMessage.objects.get().message, 'Ama Mensah: A')

    def test_command(self, mock_delay):
        out = StringIO()
        call_command('send_exam_summaries', '--class', 'B.S.7A', '--term', 'Term 1', '--year', '2024', stdout=out)
        self.assertIn('Queued 1 messages for B.S.7A (2 failed)', out.getvalue())
        self.assertEqual(SMSMessage.objects.count(), 1)

    def test_command_dry_run(self, mock_delay):
        out = StringIO()
        call_command('send_exam_summaries', '--class', 'B.S.7A', '--term', 'Term 1',
                     '--year', '2024', '--dry-run', stdout=out)
        self.assertIn('Dear Mrs Mensah', out.getvalue())
        self.assertIn('Esi Owusu: no scores, skipped', out.getvalue())
        self.assertFalse(SMSMessage.objects.exists())
        mock_delay.assert_not_called()

    def test_command_stored_template(self, mock_delay):
        SMSTemplate.objects.create(name='Short', content='{STUDENT_NAME} is {POSITION}')
        call_command('send_exam_summaries', '--class', 'B.S.7A', '--term', 'Term 1',
                     '--year', '2024', '--template', 'Short', stdout=StringIO())
        self.assertEqual(SMSMessage.objects.get().message, 'Ama Mensah is 1st out of 2')

    def test_command_unknown_class(self, mock_delay):
        with self.assertRaises(CommandError):
            call_command('send_exam_summaries', '--class', 'B.S.1Z', stdout=StringIO())


class SMSTemplateModelTest(CommunicationsDataMixin, TestCase):
    """Tests for stored templates."""

    def test_default_content(self):
        template = SMSTemplate.objects.create(name='Exam summary')
        self.assertEqual(template.content, EXAM_SUMMARY_TEMPLATE)
        self.assertEqual(template.message_type, SMSMessage.MessageType.EXAM_SUMMARY)

    def test_render(self):
        template = SMSTemplate.objects.create(name='Greeting', content='Hello {STUDENT_NAME}, grade {GRADE}')
        self.assertEqual(template.render(make_summary()), 'Hello Ama, grade B+')


class SendCommunicationTaskTest(CommunicationsDataMixin, TestCase):
    """Tests for message delivery."""

    def setUp(self):
        super().setUp()
        self.sms = SMSMessage.objects.create(recipient_phone='+233241234567', message='Hello', student=self.ama)

    def configure(self, **kwargs):
        school = SchoolSettings.load()
        for key, value in kwargs.items():
            setattr(school, key, value)
        school.save()

    def test_disabled(self):
        result = send_communication_task(self.sms.pk)
        self.sms.refresh_from_db()
        self.assertEqual(result['status'], 'disabled')
        self.assertEqual(self.sms.status, SMSMessage.Status.FAILED)

    def test_console_backend(self):
        self.configure(sms_enabled=True)
        result = send_communication_task(self.sms.pk)
        self.sms.refresh_from_db()
        self.assertEqual(result['provider'], 'console')
        self.assertEqual(self.sms.status, SMSMessage.Status.SENT)
        self.assertIsNotNone(self.sms.sent_at)

    @mock.patch('communications.tasks.requests.post')
    def test_arkesel_backend(self, mock_post):
        self.configure(sms_enabled=True, sms_backend=SMSBackend.ARKESEL,
                       sms_api_key='secret', sms_sender_id='OffinsoJHS')
        mock_post.return_value.json.return_value = {'status': 'success'}

        result = send_communication_task(self.sms.pk)

        self.sms.refresh_from_db()
        self.assertEqual(result['provider'], 'arkesel')
        self.assertEqual(self.sms.status, SMSMessage.Status.SENT)
        payload = mock_post.call_args.kwargs['json']
        self.assertEqual(payload['recipients'], ['233241234567'])
        self.assertEqual(payload['sender'], 'OffinsoJHS')
        self.assertEqual(mock_post.call_args.kwargs['headers']['api-key'], 'secret')

    @mock.patch('communications.tasks.requests.post')
    def test_arkesel_error(self, mock_post):
        self.configure(sms_enabled=True, sms_backend=SMSBackend.ARKESEL, sms_api_key='secret')
        mock_post.return_value.json.return_value = {'status': 'error', 'message': 'Insufficient balance'}

        result = send_communication_task(self.sms.pk)

        self.sms.refresh_from_db()
        self.assertEqual(result['status'], 'failed')
        self.assertEqual(self.sms.status, SMSMessage.Status.FAILED)
        self.assertIn('Insufficient balance', self.sms.error_message)

    @mock.patch('communications.tasks.requests.post')
    def test_arkesel_invalid_response(self, mock_post):
        """A body that is not JSON fails the message without retrying."""
        self.configure(sms_enabled=True, sms_backend=SMSBackend.ARKESEL, sms_api_key='secret')
        mock_post.return_value.json.side_effect = requests.JSONDecodeError('Expecting value', '<html>', 0)

        result = send_communication_task(self.sms.pk)

        self.sms.refresh_from_db()
        self.assertEqual(result['status'], 'failed')
        self.assertEqual(mock_post.call_count, 1)
        self.assertEqual(self.sms.status, SMSMessage.Status.FAILED)
        self.assertIn('invalid response', self.sms.error_message)

    def test_arkesel_without_key(self):
        self.configure(sms_enabled=True, sms_backend=SMSBackend.ARKESEL)
        result = send_communication_task(self.sms.pk)
        self.sms.refresh_from_db()
        self.assertEqual(result['status'], 'failed')
        self.assertIn('API key', self.sms.error_message)

    def test_missing_message(self):
        result = send_communication_task(self.sms.pk + 100)
        self.assertEqual(result['status'], 'missing')

    def test_request_exceptions_are_retried(self):
        self.assertIn(requests.RequestException, send_communication_task.autoretry_for)
