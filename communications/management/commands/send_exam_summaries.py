"""
Management command to send the exam summary to every guardian in a class.

Usage:
    python manage.py send_exam_summaries --class B.S.7A
    python manage.py send_exam_summaries --class B.S.7A --term "Term 2" --year 2024 --dry-run
"""
from django.core.management.base import BaseCommand, CommandError

from academics.models import Class
from communications.messages import MESSAGE_TEMPLATES, render_template
from communications.models import SMSTemplate
from communications.utils import send_exam_summaries
from gradebook.ranking import RankingMetric
from gradebook.services import build_class_summaries


class Command(BaseCommand):
    help = 'Send the exam summary message to the guardians of a class'

    def add_arguments(self, parser):
        parser.add_argument(
            '--class',
            dest='class_name',
            required=True,
            help='Class name, e.g. B.S.7A',
        )
        parser.add_argument(
            '--term',
            help='Term label (defaults to the current term)',
        )
        parser.add_argument(
            '--year',
            help='Academic year label (defaults to the current year)',
        )
        parser.add_argument(
            '--metric',
            choices=RankingMetric.values,
            default=RankingMetric.EXAM_DOUBLED,
            help='Ranking basis for the class position',
        )
        parser.add_argument(
            '--template',
            help='Name of an active SMSTemplate to use instead of the default',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Print the rendered messages without queuing them',
        )

    def handle(self, *args, **options):
        try:
            class_ = Class.objects.get(name=options['class_name'])
        except Class.DoesNotExist:
            raise CommandError(f"Class '{options['class_name']}' does not exist")

        template = self.get_template(options.get('template'))
        summaries = build_class_summaries(
            class_, term=options.get('term'), year=options.get('year'),
            metric=options['metric'],
        )

        if not summaries:
            self.stdout.write(self.style.WARNING(f'No active students in {class_.name}'))
            return

        if options['dry_run']:
            for summary in summaries:
                if not summary.has_data:
                    self.stdout.write(f'-- {summary.student_name}: no scores, skipped')
                    continue
                self.stdout.write(f'-- {summary.student_name} ({summary.guardian_phone or "no phone"})')
                self.stdout.write(render_template(template, summary))
            return

        results = send_exam_summaries(summaries, template=template)

        for error in results['errors']:
            self.stdout.write(self.style.WARNING(error))
        self.stdout.write(self.style.SUCCESS(
            f"Queued {results['success']} messages for {class_.name} "
            f"({results['failed']} failed)"
        ))

    def get_template(self, name):
        if not name:
            return MESSAGE_TEMPLATES['EXAM_SUMMARY']
        template = SMSTemplate.objects.filter(name=name, is_active=True).first()
        if template is None:
            raise CommandError(f"No active template named '{name}'")
        return template.content
