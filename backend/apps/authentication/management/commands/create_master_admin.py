"""
Create the first master admin account.

    python manage.py create_master_admin --email admin@example.com --password ...
"""

from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import AppError
from apps.authentication.services import auth_service


class Command(BaseCommand):
    help = 'Create a MASTER_ADMIN user'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--password', required=True)
        parser.add_argument('--name', default='')

    def handle(self, *args, **options):
        if len(options['password']) < 8:
            raise CommandError('Password must be at least 8 characters long')

        try:
            user = auth_service.create_master_admin(options['email'], options['password'], options['name'])
        except AppError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(f'Master admin {user.email} created'))
