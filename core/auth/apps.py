"""
ERP Auth - App Configuration
============================
Persistent bearer-token credentials and lookup.
"""

from django.apps import AppConfig


class CoreAuthConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.auth"
    label = "core_auth"
    verbose_name = "ERP Auth"
