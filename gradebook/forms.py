from django import forms

from .models import ScoreEntry


class ScoreEntryForm(forms.ModelForm):
    """
    Form for entering a subject's class and exam scores.
    The 0-50 range of each component is enforced by the model field validators.
    """

    class Meta:
        model = ScoreEntry
        fields = ['student', 'subject', 'term', 'year', 'class_score', 'exam_score', 'remarks']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['subject'].required = True

    def clean_year(self):
        year = (self.cleaned_data.get('year') or '').strip()
        if not year:
            raise forms.ValidationError('Please select an academic year')
        return year
