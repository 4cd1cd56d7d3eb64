"""
Management command to create or update a marketplace administrator.

Usage:
    python manage.py create_marketplace_admin --email admin@example.com --username admin
    (password is read from MARKETPLACE_ADMIN_PASSWORD or prompted for)
"""

import getpass
import os

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from accounts.models import User


class Command(BaseCommand):
    help = 'Creates (or promotes) a marketplace administrator account'

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--username', required=True)
        parser.add_argument('--full-name', default='Marketplace Admin')
        parser.add_argument(
            '--password',
            help='Defaults to MARKETPLACE_ADMIN_PASSWORD, then an interactive prompt'
        )

    def handle(self, *args, **options):
        password = options['password'] or os.getenv('MARKETPLACE_ADMIN_PASSWORD')
        if not password:
            password = getpass.getpass('Password: ')
        if not password:
            raise CommandError('A password is required.')

        email = options['email']
        username = options['username']

        with transaction.atomic():
            user = User.objects.filter(email=email).first()
            if user:
                self.stdout.write(
                    self.style.WARNING(f'User with email {email} already exists, promoting.')
                )
                user.username = username
            else:
                user = User(username=username, email=email)

            user.full_name = user.full_name or options['full_name']
            user.role = User.UserRole.ADMIN
            user.is_active = True
            user.is_staff = True
            user.set_password(password)
            user.save()

        self.stdout.write('=' * 60)
        self.stdout.write(self.style.SUCCESS('MARKETPLACE ADMIN READY'))
        self.stdout.write('=' * 60)
        self.stdout.write(f'Username:  {user.username}')
        self.stdout.write(f'Email:     {user.email}')
        self.stdout.write(f'Role:      {user.get_role_display()}')
        self.stdout.write('Log in with POST /api/auth/login/ and use the access token as')
        self.stdout.write('   Authorization: Bearer <access_token>')
