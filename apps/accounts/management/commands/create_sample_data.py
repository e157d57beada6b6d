"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data

This creates:
- 4 users (super admin, admin, asha, ravi)
- 3 parking lots
- Investments in each lifecycle state (pending, paid, approved, rejected)
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import KYCStatus, User, UserRole
from apps.investments.models import Investment, PaymentStatus
from apps.investments.services import (
    approve_investment_after_payment,
    confirm_payment,
    create_investment_after_offline_payment,
    create_pending_investment,
    reject_investment,
)
from apps.parking.models import ParkingLot
from apps.parking.services import create_parking_lot


class Command(BaseCommand):
    help = 'Create sample data for testing the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        lots = self.create_parking_lots()
        self.create_investments(users, lots)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Login credentials (password for all: SamplePass123!):')
        for user in users.values():
            self.stdout.write(f'  {user.email} ({user.role})')

    def clear_data(self):
        Investment.objects.all().delete()
        ParkingLot.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        specs = {
            'super_admin': ('superadmin@ownparks.local', 'Super Admin', UserRole.SUPER_ADMIN),
            'admin': ('admin@ownparks.local', 'Admin', UserRole.ADMIN),
            'asha': ('asha@ownparks.local', 'Asha Rao', UserRole.USER),
            'ravi': ('ravi@ownparks.local', 'Ravi Kumar', UserRole.USER),
        }
        users = {}
        for key, (email, name, role) in specs.items():
            user, created = User.objects.get_or_create(
                email=email,
                defaults={
                    'name': name,
                    'role': role,
                    'kyc_status': KYCStatus.VERIFIED,
                    'role_assigned_by': 'system',
                },
            )
            if created:
                user.set_password('SamplePass123!')
                user.save()
            users[key] = user
        self.stdout.write(f'  Users: {len(users)}')
        return users

    def create_parking_lots(self):
        lots = [
            create_parking_lot(
                name='Bandra West Plaza',
                location='Bandra West, Mumbai',
                price=Decimal('150000.00'),
                roi=Decimal('12.50'),
                total_lots=20,
                details='Covered parking next to the station.',
            ),
            create_parking_lot(
                name='Koramangala Hub',
                location='Koramangala, Bengaluru',
                price=Decimal('120000.00'),
                roi=Decimal('11.00'),
                total_lots=10,
            ),
            create_parking_lot(
                name='Cyber City Deck',
                location='DLF Cyber City, Gurugram',
                price=Decimal('200000.00'),
                roi=Decimal('13.25'),
                total_lots=5,
            ),
        ]
        self.stdout.write(f'  Parking lots: {len(lots)}')
        return lots

    def create_investments(self, users, lots):
        admin = users['admin']

        # Pending request, nothing reserved yet
        create_pending_investment(
            user=users['asha'],
            parking_lot_id=lots[0].id,
            amount=Decimal('150000.00'),
        )

        # Online request, paid and approved
        paid = create_pending_investment(
            user=users['asha'],
            parking_lot_id=lots[1].id,
            amount=Decimal('240000.00'),
            selected_lots=2,
            payment_method='online',
        )
        confirm_payment(
            investment_id=paid.id,
            payment_status=PaymentStatus.SUCCESS,
            confirmed_by=admin,
        )
        approve_investment_after_payment(investment_id=paid.id, approved_by=admin, auto_approve=True)

        # Offline payment recorded by an admin, awaiting approval
        create_investment_after_offline_payment(
            user_id=users['ravi'].id,
            parking_lot_id=lots[2].id,
            amount=Decimal('200000.00'),
            created_by=admin,
            notes='Cheque received at office',
        )

        # Rejected request
        rejected = create_pending_investment(
            user=users['ravi'],
            parking_lot_id=lots[0].id,
            amount=Decimal('150000.00'),
        )
        reject_investment(
            investment_id=rejected.id,
            rejected_by=admin,
            reason='Payment reference did not match',
        )

        self.stdout.write(f'  Investments: {Investment.objects.count()}')
