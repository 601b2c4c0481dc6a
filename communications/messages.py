"""
Guardian message templates and placeholder rendering.

Placeholders are upper-case tokens in braces, e.g. {STUDENT_NAME}. Tokens
without a value are left in the output unchanged.
"""
import re

from gradebook.utils import format_position, format_score

PLACEHOLDER_PATTERN = re.compile(r'\{([A-Z_]+)\}')

EXAM_SUMMARY_TEMPLATE = """Dear {GUARDIAN_NAME},

Here is the {TERM} examination summary for {STUDENT_NAME} ({CLASS}) - Academic Year {ACADEMIC_YEAR}:

PERFORMANCE SUMMARY:
Total Subjects: {TOTAL_SUBJECTS}
Total Exam Score: {TOTAL_EXAM_SCORE}
Average Score: {AVERAGE_SCORE}%
Overall Grade: {GRADE}
Class Position: {POSITION}

SUBJECT BREAKDOWN:
{SUBJECTS_BREAKDOWN}

PERFORMANCE ANALYSIS:
{STUDENT_NAME} {PERFORMANCE_MESSAGE}.

Thank you for your continued support in your child's education.

Best regards,
{SCHOOL_NAME}

For any questions, please contact the school administration."""

REMINDER_TEMPLATE = """Dear {GUARDIAN_NAME},

This is a friendly reminder that {STUDENT_NAME} ({CLASS}) has upcoming examinations.

Please ensure your child is prepared and arrives on time.

Thank you,
{SCHOOL_NAME}"""

ATTENDANCE_ALERT_TEMPLATE = """Dear {GUARDIAN_NAME},

We noticed that {STUDENT_NAME} ({CLASS}) was absent from school today ({DATE}).

Please contact the school if there are any concerns.

Best regards,
{SCHOOL_NAME}"""

GENERAL_NOTICE_TEMPLATE = """Dear {GUARDIAN_NAME},

{MESSAGE_CONTENT}

Thank you for your attention.

{SCHOOL_NAME}"""

MESSAGE_TEMPLATES = {
    'EXAM_SUMMARY': EXAM_SUMMARY_TEMPLATE,
    'REMINDER': REMINDER_TEMPLATE,
    'ATTENDANCE_ALERT': ATTENDANCE_ALERT_TEMPLATE,
    'GENERAL_NOTICE': GENERAL_NOTICE_TEMPLATE,
}

MESSAGE_PLACEHOLDERS = (
    '{GUARDIAN_NAME}',
    '{STUDENT_NAME}',
    '{CLASS}',
    '{TERM}',
    '{ACADEMIC_YEAR}',
    '{TOTAL_SUBJECTS}',
    '{TOTAL_EXAM_SCORE}',
    '{AVERAGE_SCORE}',
    '{GRADE}',
    '{POSITION}',
    '{SUBJECTS_BREAKDOWN}',
    '{PERFORMANCE_MESSAGE}',
    '{SCHOOL_NAME}',
)


def format_subject_line(subject):
    """One breakdown line, e.g. 'Mathematics: 79% (Class: 38, Exam: 41) - Grade B'."""
    return (
        f"{subject.subject_name}: {format_score(subject.total_score)}% "
        f"(Class: {format_score(subject.class_score)}, "
        f"Exam: {format_score(subject.exam_score)}) - Grade {subject.grade}"
    )


def format_subjects_breakdown(subjects):
    """Breakdown lines in aggregation order."""
    return '\n'.join(format_subject_line(s) for s in subjects)


def summary_context(summary):
    """Placeholder values for an AcademicSummary."""
    return {
        'GUARDIAN_NAME': summary.guardian_name or 'Parent/Guardian',
        'STUDENT_NAME': summary.student_name,
        'CLASS': summary.class_name,
        'TERM': summary.term,
        'ACADEMIC_YEAR': summary.academic_year,
        'TOTAL_SUBJECTS': str(summary.total_subjects),
        'TOTAL_EXAM_SCORE': format_score(summary.total_exam_score_doubled),
        'AVERAGE_SCORE': str(summary.overall_average),
        'GRADE': summary.actual_grade or '',
        'POSITION': format_position(summary.position, summary.class_size),
        'SUBJECTS_BREAKDOWN': format_subjects_breakdown(summary.subjects),
        'PERFORMANCE_MESSAGE': summary.performance_message,
        'SCHOOL_NAME': summary.school_name,
    }


def render_template(template, summary, extra=None):
    """
    Substitute summary fields into a template.

    Args:
        template: Template text with {PLACEHOLDER} tokens
        summary: AcademicSummary to read values from
        extra: Optional mapping of additional placeholder values,
            e.g. {'DATE': '12/03/2024'} or {'MESSAGE_CONTENT': '...'}

    Returns:
        str: The rendered message
    """
    context = summary_context(summary)
    if extra:
        context.update({key: str(value) for key, value in extra.items()})

    def replace(match):
        return context.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(replace, template)
