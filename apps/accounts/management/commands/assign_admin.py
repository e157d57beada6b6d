"""
Management command to make an existing user a super admin.

Usage:
    python manage.py assign_admin admin@example.com
    python manage.py assign_admin admin@example.com --role admin
"""

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User, UserRole


class Command(BaseCommand):
    help = 'Grant the super admin (or admin) role to a user by email'

    def add_arguments(self, parser):
        parser.add_argument('email', help='Email of an existing user')
        parser.add_argument(
            '--role',
            choices=[UserRole.ADMIN, UserRole.SUPER_ADMIN],
            default=UserRole.SUPER_ADMIN,
            help='Role to assign (default: super_admin)',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        email = options['email']

        try:
            user = User.objects.select_for_update().get(email__iexact=email)
        except User.DoesNotExist:
            raise CommandError(f'No user found with email: {email}')

        user.role = options['role']
        user.role_assigned_by = 'system'
        user.role_assigned_at = timezone.now()
        user.save(update_fields=['role', 'role_assigned_by', 'role_assigned_at', 'updated_at'])

        self.stdout.write(self.style.SUCCESS(
            f'{user.email} is now {user.get_role_display()}'
        ))
