import core.models
import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='SchoolSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('display_name', models.CharField(blank=True, max_length=100)),
                ('motto', models.CharField(blank=True, max_length=200)),
                ('current_term', models.CharField(choices=[('Term 1', 'Term 1'), ('Term 2', 'Term 2'), ('Term 3', 'Term 3')], default='Term 1', max_length=10)),
                ('current_year', models.CharField(default=core.models.current_year_label, help_text='Academic year label, e.g. 2024', max_length=9)),
                ('min_average_for_promotion', models.PositiveSmallIntegerField(default=50, help_text='Minimum overall average (%) required for promotion', validators=[django.core.validators.MaxValueValidator(100)])),
                ('min_subjects_to_pass', models.PositiveSmallIntegerField(default=5, help_text='Minimum number of subjects a student must pass for promotion')),
                ('total_subjects', models.PositiveSmallIntegerField(default=8, help_text='Number of subjects offered at this level', validators=[django.core.validators.MinValueValidator(1)])),
                ('sms_enabled', models.BooleanField(default=False)),
                ('sms_backend', models.CharField(choices=[('console', 'Console (development)'), ('arkesel', 'Arkesel')], default='console', max_length=20)),
                ('sms_api_key', models.CharField(blank=True, max_length=200)),
                ('sms_sender_id', models.CharField(blank=True, help_text='Alphanumeric sender ID (max 11 characters)', max_length=11)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'School Settings',
                'verbose_name_plural': 'School Settings',
            },
        ),
    ]
