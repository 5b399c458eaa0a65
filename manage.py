#!/usr/bin/env python
"""
Command-line entry point for the dashboard relay.

Defaults ``DJANGO_SETTINGS_MODULE`` to ``dashboard.settings``; use
``runserver`` for local development and ``check_upstream`` to verify the
configured MediBill API.
"""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'dashboard.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Is it installed in the active environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
