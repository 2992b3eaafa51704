# store_credits/apps.py

from django.apps import AppConfig


class StoreCreditsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "store_credits"
    verbose_name = "Store Credit"
