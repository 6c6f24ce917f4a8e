"""
Root pytest configuration.

Settings and the import path come from [tool.pytest.ini_options] in
pyproject.toml; app-wide hooks and fixtures live in app/conftest.py.
"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
