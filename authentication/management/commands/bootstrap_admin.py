"""
Django management command to create the first admin account
"""
import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from authentication.models import Role

User = get_user_model()

DEMO_USERS = [
    ('john_sales', 'John Sales', Role.SALES),
    ('mary_marketing', 'Mary Marketing', Role.MARKETING),
]


class Command(BaseCommand):
    help = 'Creates the initial admin user (and optionally demo sales/marketing users)'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='admin')
        parser.add_argument('--full-name', default='System Admin')
        parser.add_argument(
            '--password',
            default=os.getenv('BOOTSTRAP_ADMIN_PASSWORD'),
            help='Defaults to $BOOTSTRAP_ADMIN_PASSWORD',
        )
        parser.add_argument(
            '--with-demo-users',
            action='store_true',
            help='Also create john_sales and mary_marketing with the same password',
        )

    def handle(self, *args, **options):
        password = options['password']
        if not password or len(password) < 6:
            raise CommandError('A password of at least 6 characters is required (--password)')

        username = options['username']
        if User.objects.filter(username=username).exists():
            self.stdout.write(self.style.NOTICE(f'User {username} already exists, leaving it unchanged'))
        else:
            User.objects.create_superuser(
                username=username,
                password=password,
                full_name=options['full_name'],
                role=Role.ADMIN,
            )
            self.stdout.write(self.style.SUCCESS(f'✓ Admin user created: {username}'))

        if options['with_demo_users']:
            for demo_username, full_name, role in DEMO_USERS:
                user, created = User.objects.get_or_create(
                    username=demo_username,
                    defaults={'full_name': full_name, 'role': role},
                )
                if created:
                    user.set_password(password)
                    user.save(update_fields=['password'])
                    self.stdout.write(self.style.SUCCESS(f'✓ {role.label} user created: {demo_username}'))
