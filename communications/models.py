from django.conf import settings
from django.db import models
from django.utils import timezone

from .messages import EXAM_SUMMARY_TEMPLATE, MESSAGE_PLACEHOLDERS, render_template


class SMSMessage(models.Model):
    """Log of all guardian messages queued for delivery."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        SENT = 'sent', 'Sent'
        FAILED = 'failed', 'Failed'

    class MessageType(models.TextChoices):
        GENERAL = 'general', 'General Notice'
        EXAM_SUMMARY = 'exam_summary', 'Exam Summary'
        REMINDER = 'reminder', 'Exam Reminder'
        ATTENDANCE = 'attendance', 'Attendance Alert'

    recipient_phone = models.CharField(max_length=20)
    recipient_name = models.CharField(max_length=100, blank=True)
    student = models.ForeignKey(
        'students.Student',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sms_messages'
    )
    message = models.TextField()
    message_type = models.CharField(
        max_length=20,
        choices=MessageType.choices,
        default=MessageType.GENERAL
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING
    )
    provider_response = models.TextField(blank=True)
    error_message = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_sms'
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'SMS Message'
        verbose_name_plural = 'SMS Messages'
        indexes = [
            models.Index(fields=['created_at', 'status'], name='sms_created_status_idx'),
            models.Index(fields=['message_type'], name='sms_type_idx'),
            models.Index(fields=['recipient_phone'], name='sms_recipient_idx'),
        ]

    def __str__(self):
        return f"SMS to {self.recipient_phone} - {self.get_status_display()}"

    def mark_sent(self, response=''):
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.provider_response = str(response)
        self.save(update_fields=['status', 'sent_at', 'provider_response'])

    def mark_failed(self, error=''):
        self.status = self.Status.FAILED
        self.error_message = str(error)
        self.save(update_fields=['status', 'error_message'])


class SMSTemplate(models.Model):
    """Reusable guardian message templates."""

    name = models.CharField(max_length=100)
    message_type = models.CharField(
        max_length=20,
        choices=SMSMessage.MessageType.choices,
        default=SMSMessage.MessageType.EXAM_SUMMARY
    )
    content = models.TextField(
        default=EXAM_SUMMARY_TEMPLATE,
        help_text="Placeholders: " + ", ".join(MESSAGE_PLACEHOLDERS)
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        indexes = [
            models.Index(fields=['message_type', 'is_active'], name='smstemplate_type_active_idx'),
        ]

    def __str__(self):
        return self.name

    def render(self, summary, extra=None):
        """Render template against an AcademicSummary."""
        return render_template(self.content, summary, extra=extra)
