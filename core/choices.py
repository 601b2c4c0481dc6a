from django.db import models
from django.utils.translation import gettext_lazy as _


class TermChoice(models.TextChoices):
    TERM_1 = 'Term 1', _('Term 1')
    TERM_2 = 'Term 2', _('Term 2')
    TERM_3 = 'Term 3', _('Term 3')


# Promotion decisions are taken on the final term of the year
FINAL_TERM = TermChoice.TERM_3


class SMSBackend(models.TextChoices):
    CONSOLE = 'console', _('Console (development)')
    ARKESEL = 'arkesel', _('Arkesel')
