from django.core.cache import cache
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone

from .choices import TermChoice, SMSBackend


def current_year_label():
    return str(timezone.now().year)


class SchoolSettings(models.Model):
    """
    Stores configuration specific to this school.
    Holds the active term/year labels and the configurable promotion criteria.
    """
    # Branding
    display_name = models.CharField(max_length=100, blank=True)
    motto = models.CharField(max_length=200, blank=True)

    # Active academic period
    current_term = models.CharField(
        max_length=10,
        choices=TermChoice.choices,
        default=TermChoice.TERM_1
    )
    current_year = models.CharField(
        max_length=9,
        default=current_year_label,
        help_text="Academic year label, e.g. 2024"
    )

    # Promotion criteria
    min_average_for_promotion = models.PositiveSmallIntegerField(
        default=50,
        validators=[MaxValueValidator(100)],
        help_text='Minimum overall average (%) required for promotion'
    )
    min_subjects_to_pass = models.PositiveSmallIntegerField(
        default=5,
        help_text='Minimum number of subjects a student must pass for promotion'
    )
    total_subjects = models.PositiveSmallIntegerField(
        default=8,
        validators=[MinValueValidator(1)],
        help_text='Number of subjects offered at this level'
    )

    # SMS
    sms_enabled = models.BooleanField(default=False)
    sms_backend = models.CharField(
        max_length=20,
        choices=SMSBackend.choices,
        default=SMSBackend.CONSOLE
    )
    sms_api_key = models.CharField(max_length=200, blank=True)
    sms_sender_id = models.CharField(
        max_length=11,
        blank=True,
        help_text='Alphanumeric sender ID (max 11 characters)'
    )

    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)
        cache.delete('school_profile')

    @classmethod
    def load(cls):
        profile = cache.get('school_profile')
        if profile is None:
            profile, created = cls.objects.get_or_create(pk=1)
            cache.set('school_profile', profile, 60*60*24)
        return profile

    class Meta:
        verbose_name = "School Settings"
        verbose_name_plural = "School Settings"

    def __str__(self):
        return "School Profile & Settings"
