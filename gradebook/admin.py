from django.contrib import admin

from .forms import ScoreEntryForm
from .models import ScoreEntry


@admin.register(ScoreEntry)
class ScoreEntryAdmin(admin.ModelAdmin):
    form = ScoreEntryForm
    list_display = ['student', 'subject', 'term', 'year', 'class_score', 'exam_score', 'total_score', 'grade']
    list_filter = ['term', 'year', 'subject', 'student__current_class']
    search_fields = ['student__first_name', 'student__last_name', 'student__admission_number']
    raw_id_fields = ['student', 'entered_by']
