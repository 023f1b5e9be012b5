#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

Taskboard - collaborative Kanban
"""

import os
import sys


def main():
    """Run administrative tasks."""

    # development settings by default
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    # Taskboard shortcuts
    if len(sys.argv) > 1:
        command = sys.argv[1]
        manage = f'"{sys.executable}" manage.py'

        # First-time setup
        if command == 'setup':
            print("🚀 Setting up Taskboard...")

            print("📊 Applying migrations...")
            if os.system(f'{manage} migrate') != 0:
                print("❌ Migrations failed")
                return

            print("📁 Collecting static files...")
            os.system(f'{manage} collectstatic --noinput')

            print("🌱 Seeding demo data...")
            if os.system(f'{manage} seed') == 0:
                print("✅ Setup done!")
                print("🔑 Log in as ada / taskboard123")
            else:
                print("⚠️  Partial setup (no demo data)")
            return

        # Wipe everything and seed again
        elif command == 'reset':
            confirm = input("⚠️  This deletes ALL data. Continue? (y/N): ")
            if confirm.lower() == 'y':
                print("🗑️  Resetting database...")
                os.system(f'{manage} flush --noinput')
                os.system(f'{manage} migrate')
                os.system(f'{manage} seed')
                print("✅ Reset done!")
            return

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
