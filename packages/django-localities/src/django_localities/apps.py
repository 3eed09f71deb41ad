"""Django app configuration for django-localities."""
from django.apps import AppConfig


class DjangoLocalitiesConfig(AppConfig):
    """App configuration for django-localities."""

    name = 'django_localities'
    verbose_name = 'Django Localities'
    default_auto_field = 'django.db.models.BigAutoField'
