import communications.messages
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SMSTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('message_type', models.CharField(choices=[('general', 'General Notice'), ('exam_summary', 'Exam Summary'), ('reminder', 'Exam Reminder'), ('attendance', 'Attendance Alert')], default='exam_summary', max_length=20)),
                ('content', models.TextField(default=communications.messages.EXAM_SUMMARY_TEMPLATE, help_text='Placeholders: ' + ', '.join(communications.messages.MESSAGE_PLACEHOLDERS))),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
                'indexes': [models.Index(fields=['message_type', 'is_active'], name='smstemplate_type_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='SMSMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('recipient_phone', models.CharField(max_length=20)),
                ('recipient_name', models.CharField(blank=True, max_length=100)),
                ('message', models.TextField()),
                ('message_type', models.CharField(choices=[('general', 'General Notice'), ('exam_summary', 'Exam Summary'), ('reminder', 'Exam Reminder'), ('attendance', 'Attendance Alert')], default='general', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('sent', 'Sent'), ('failed', 'Failed')], default='pending', max_length=20)),
                ('provider_response', models.TextField(blank=True)),
                ('error_message', models.TextField(blank=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_sms', to=settings.AUTH_USER_MODEL)),
                ('student', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sms_messages', to='students.student')),
            ],
            options={
                'verbose_name': 'SMS Message',
                'verbose_name_plural': 'SMS Messages',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['created_at', 'status'], name='sms_created_status_idx'),
                    models.Index(fields=['message_type'], name='sms_type_idx'),
                    models.Index(fields=['recipient_phone'], name='sms_recipient_idx'),
                ],
            },
        ),
    ]
