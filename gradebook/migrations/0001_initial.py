import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('academics', '0001_initial'),
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ScoreEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('term', models.CharField(choices=[('Term 1', 'Term 1'), ('Term 2', 'Term 2'), ('Term 3', 'Term 3')], default='Term 1', max_length=10)),
                ('year', models.CharField(help_text='Academic year label, e.g. 2024', max_length=9)),
                ('class_score', models.DecimalField(decimal_places=2, help_text='Class work score (0-50)', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('50'))])),
                ('exam_score', models.DecimalField(decimal_places=2, help_text='Examination score (0-50)', max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('50'))])),
                ('remarks', models.CharField(blank=True, max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('entered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='score_entries', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='score_entries', to='students.student')),
                ('subject', models.ForeignKey(help_text='Null when the subject record has been removed', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='score_entries', to='academics.subject')),
            ],
            options={
                'verbose_name': 'Score Entry',
                'verbose_name_plural': 'Score Entries',
                'db_table': 'score_entry',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(fields=['student', 'term', 'year'], name='score_student_period_idx'),
                    models.Index(fields=['term', 'year'], name='score_period_idx'),
                ],
                'unique_together': {('student', 'subject', 'term', 'year')},
            },
        ),
    ]
