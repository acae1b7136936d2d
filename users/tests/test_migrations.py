from io import StringIO

from django.core.management import call_command
from django.test import TestCase


class MigrationStateTestCase(TestCase):
    """Las migraciones reflejan el estado actual de los modelos."""

    def test_no_pending_model_changes(self):
        out = StringIO()
        try:
            call_command('makemigrations', '--check', '--dry-run', stdout=out)
        except SystemExit:
            self.fail(f"Cambios de modelos sin migración:\n{out.getvalue()}")
