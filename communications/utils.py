import re
import logging

from django.core.exceptions import ValidationError

from gradebook import config
from .messages import EXAM_SUMMARY_TEMPLATE, render_template

logger = logging.getLogger(__name__)

# E.164 phone number pattern (international format)
E164_PATTERN = re.compile(r'^\+[1-9]\d{1,14}$')


def normalize_phone_number(phone):
    """
    Normalize phone number to E.164 format for Ghana.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+233XXXXXXXXX)
    """
    if not phone:
        return None

    # Strip whitespace and common separators
    phone = re.sub(r'[\s\-\.\(\)]', '', phone.strip())
    if not phone:
        return None

    if phone.startswith('+'):
        return phone

    # Ghana local format (0XX XXX XXXX)
    if phone.startswith('0') and len(phone) == 10:
        return '+233' + phone[1:]

    # Ghana format without leading zero (233XXXXXXXXX)
    if phone.startswith('233') and len(phone) == 12:
        return '+' + phone

    # Ghana number without prefix
    if len(phone) == 9 and phone[0] in '235':
        return '+233' + phone

    return '+' + phone


def validate_phone_number(phone):
    """
    Validate phone number is in E.164 format.

    Returns:
        Cleaned phone number

    Raises:
        ValidationError: If phone number is invalid
    """
    if not phone:
        raise ValidationError("Phone number is required")

    phone = normalize_phone_number(phone)

    if not phone or not E164_PATTERN.match(phone):
        raise ValidationError(
            f"Invalid phone number format: {phone}. "
            "Must be in E.164 format (e.g., +233541234567)"
        )

    return phone


def send_sms(to_phone, message, student=None, message_type='general', created_by=None):
    """
    Queue an SMS message for delivery.

    Args:
        to_phone: Phone number (will be normalized to E.164)
        message: SMS message content
        student: Optional Student instance to link message to
        message_type: One of SMSMessage.MessageType
        created_by: Optional User who initiated the send

    Returns:
        dict: Result with 'success', 'message_id', 'error' keys
    """
    from .models import SMSMessage
    from .tasks import send_communication_task

    try:
        validated_phone = validate_phone_number(to_phone)
    except ValidationError as e:
        return {'success': False, 'error': ' '.join(e.messages)}

    max_length = config.SMS_MAX_LENGTH
    if len(message) > max_length:
        logger.warning(
            f"SMS message exceeds {max_length} chars ({len(message)} chars). "
            "Message may be split into multiple parts."
        )

    sms_record = SMSMessage.objects.create(
        recipient_phone=validated_phone,
        recipient_name=student.guardian_name if student else '',
        student=student,
        message=message,
        message_type=message_type,
        status=SMSMessage.Status.PENDING,
        created_by=created_by,
    )

    send_communication_task.delay(sms_record.pk)

    return {
        'success': True,
        'message_id': sms_record.pk,
        'phone': validated_phone,
    }


def send_exam_summaries(summaries, template=EXAM_SUMMARY_TEMPLATE, created_by=None):
    """
    Render and queue the exam summary for each student's guardian.

    Students without a guardian phone or without scores for the period
    are skipped and reported as failures.

    Args:
        summaries: Iterable of AcademicSummary
        template: Template text, defaults to the exam summary template
        created_by: Optional User who initiated the send

    Returns:
        dict: {'success': int, 'failed': int, 'errors': [str]}
    """
    from students.models import Student
    from .models import SMSMessage

    results = {'success': 0, 'failed': 0, 'errors': []}

    summaries = list(summaries)
    students = Student.objects.in_bulk([s.student_id for s in summaries])

    for summary in summaries:
        if not summary.guardian_phone:
            results['failed'] += 1
            results['errors'].append(f"{summary.student_name}: No guardian phone number")
            continue

        if not summary.has_data:
            results['failed'] += 1
            results['errors'].append(
                f"{summary.student_name}: No scores for {summary.term} {summary.academic_year}"
            )
            continue

        message = render_template(template, summary)
        result = send_sms(
            summary.guardian_phone,
            message,
            student=students.get(summary.student_id),
            message_type=SMSMessage.MessageType.EXAM_SUMMARY,
            created_by=created_by,
        )

        if result['success']:
            results['success'] += 1
        else:
            results['failed'] += 1
            results['errors'].append(f"{summary.student_name}: {result['error']}")

    logger.info(
        f"Exam summaries queued: {results['success']} sent, {results['failed']} failed"
    )
    return results
