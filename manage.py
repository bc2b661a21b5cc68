#!/usr/bin/env python
"""Management commands for the hkare console, e.g. ``manage.py refresh_lookups``."""
import os
import sys


def main() -> None:
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hkare.settings')
    try:
        from django.core.management import execute_from_command_line  # type: ignore
    except ImportError as exc:
        raise ImportError(
            "Django is not importable; install the project with `pip install -e .` "
            "inside an active virtual environment."
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
