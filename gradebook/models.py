from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from academics.models import Subject
from core.choices import TermChoice
from students.models import Student
from .grading import GradingScheme, classify


class ScoreEntry(models.Model):
    """
    One subject's class score and exam score for a student in a term/year.
    Each component is marked out of 50, giving a total out of 100.
    """
    student = models.ForeignKey(
        Student,
        on_delete=models.CASCADE,
        related_name='score_entries',
        db_index=True
    )
    subject = models.ForeignKey(
        Subject,
        on_delete=models.SET_NULL,
        null=True,
        related_name='score_entries',
        help_text='Null when the subject record has been removed'
    )
    term = models.CharField(
        max_length=10,
        choices=TermChoice.choices,
        default=TermChoice.TERM_1
    )
    year = models.CharField(
        max_length=9,
        help_text='Academic year label, e.g. 2024'
    )
    class_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('50'))],
        help_text='Class work score (0-50)'
    )
    exam_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('50'))],
        help_text='Examination score (0-50)'
    )
    remarks = models.CharField(max_length=200, blank=True)
    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='score_entries'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        subject_name = self.subject.name if self.subject_id else 'Unknown Subject'
        return f"{self.student} - {subject_name} ({self.term} {self.year}): {self.total_score}"

    @property
    def total_score(self):
        return Decimal(str(self.class_score)) + Decimal(str(self.exam_score))

    @property
    def grade(self):
        return classify(self.total_score, GradingScheme.FOUR_BAND)

    class Meta:
        db_table = 'score_entry'
        ordering = ['created_at', 'id']
        verbose_name = 'Score Entry'
        verbose_name_plural = 'Score Entries'
        unique_together = ['student', 'subject', 'term', 'year']
        indexes = [
            models.Index(fields=['student', 'term', 'year'], name='score_student_period_idx'),
            models.Index(fields=['term', 'year'], name='score_period_idx'),
        ]
