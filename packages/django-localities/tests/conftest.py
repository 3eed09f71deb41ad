"""Pytest configuration for django-localities tests."""
import django
import pytest
from django.conf import settings


def pytest_configure():
    """Configure Django settings for pytest."""
    if not settings.configured:
        settings.configure(
            DEBUG=True,
            DATABASES={
                'default': {
                    'ENGINE': 'django.db.backends.sqlite3',
                    'NAME': ':memory:',
                }
            },
            INSTALLED_APPS=[
                'django.contrib.contenttypes',
                'django.contrib.auth',
                'django_localities',
            ],
            DEFAULT_AUTO_FIELD='django.db.models.BigAutoField',
            USE_TZ=True,
        )
    django.setup()


@pytest.fixture(autouse=True)
def fresh_geo_settings():
    """Rebuild geometry settings from Django settings for every test."""
    from django_localities.conf import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()
