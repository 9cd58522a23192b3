#!/usr/bin/env python
"""
Command line entry point for the front-desk scheduling backend.

Points Django at ``frontdesk.settings`` and hands over to the management
utility (``migrate``, ``runserver``, ``seed_schedule`` ...).
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'frontdesk.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed and available on your "
            "PYTHONPATH environment variable?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
