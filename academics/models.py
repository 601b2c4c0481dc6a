from django.db import models


class Class(models.Model):
    """
    Represents a class/classroom grouping of students.

    Name format for Basic School classes: B.S.7A, B.S.8C, B.S.9B
    """
    # Students in the final level graduate instead of moving up
    FINAL_LEVEL = 9

    level_number = models.PositiveSmallIntegerField(
        help_text="7, 8, 9, etc."
    )
    section = models.CharField(
        max_length=5,
        help_text="A, B, C, etc."
    )

    # Auto-generated class name
    name = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        help_text="Auto-generated: B.S.7A"
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['level_number', 'section']
        verbose_name = "Class"
        verbose_name_plural = "Classes"
        unique_together = ['level_number', 'section']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.section = self.section.upper()
        self.name = self.generate_name()
        super().save(*args, **kwargs)

    def generate_name(self):
        """Generate class name from level and section."""
        return f"B.S.{self.level_number}{self.section.upper()}"

    @property
    def is_final_level(self):
        return self.level_number >= self.FINAL_LEVEL

    def next_class_name(self):
        """Name of the class a promoted student moves to, or 'Graduate'."""
        if self.is_final_level:
            return 'Graduate'
        return f"B.S.{self.level_number + 1}{self.section.upper()}"


class Subject(models.Model):
    """
    Represents a subject taught at the school.
    Subjects can be core (mandatory) or elective.
    """
    name = models.CharField(
        max_length=100,
        help_text="e.g., Mathematics, English Language, Integrated Science"
    )
    code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Canonical subject code, e.g. MATH"
    )
    description = models.TextField(blank=True)
    is_core = models.BooleanField(
        default=True,
        help_text="Core subjects are mandatory"
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-is_core', 'name']
        verbose_name = "Subject"
        verbose_name_plural = "Subjects"

    def __str__(self):
        return self.name
