# apps/core/management/commands/seed.py

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.board import services
from apps.core.models import Board, BoardMember, User

DEMO_PASSWORD = 'taskboard123'

DEMO_USERS = [
    ('ada', 'Ada', 'Lovelace'),
    ('grace', 'Grace', 'Hopper'),
    ('linus', 'Linus', 'Torvalds'),
]

DEMO_TASKS = {
    'To Do': ['Write onboarding guide', 'Set up staging database', 'Plan sprint review'],
    'In Progress': ['Drag-and-drop polish', 'Member search endpoint'],
    'Done': ['Project skeleton'],
}


class Command(BaseCommand):
    help = 'Creates demo users and a demo board (idempotent)'

    def add_arguments(self, parser):
        parser.add_argument('--flush', action='store_true', help='Delete existing demo boards first')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('🌱 Seeding demo data...')

        users = [self._user(*data) for data in DEMO_USERS]
        owner = users[0]

        if options['flush']:
            deleted, _ = Board.objects.filter(owner=owner).delete()
            self.stdout.write(f'  🗑️  {deleted} rows removed')

        board = Board.objects.filter(owner=owner, title='Demo board').first()
        if board:
            self.stdout.write(self.style.WARNING('  ⚠️  Demo board already exists, nothing to do'))
            return

        board = services.create_board(owner, 'Demo board', 'Drag the cards around from two browsers')
        services.add_member(board, owner, users[1], BoardMember.ADMIN)
        services.add_member(board, owner, users[2], BoardMember.VIEWER)

        lists = {tl.title: tl for tl in board.lists.all()}
        for list_title, titles in DEMO_TASKS.items():
            task_list = lists.get(list_title) or services.create_list(board, owner, list_title)
            for title in titles:
                services.create_task(task_list, owner, title)

        self.stdout.write(
            self.style.SUCCESS(
                f'\n✅ Demo board created: {board.id}\n'
                f'   Users: {", ".join(u.username for u in users)} (password: {DEMO_PASSWORD})\n'
            )
        )

    def _user(self, username, first_name, last_name):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                'first_name': first_name,
                'last_name': last_name,
                'email': f'{username}@example.com',
            }
        )
        if created:
            user.set_password(DEMO_PASSWORD)
            user.save()
            self.stdout.write(f'  👤 User {username} created')
        return user
