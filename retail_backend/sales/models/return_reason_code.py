# sales/models/return_reason_code.py

from django.db import models


class ReturnReasonCode(models.Model):
    """
    Catalog of reasons a cashier can pick when taking an item back.
    Codes flagged requires_notes force a free-text explanation per line.
    """

    code = models.CharField(max_length=32, unique=True)
    description = models.CharField(max_length=255)
    requires_notes = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "code"]

    def __str__(self):
        return f"{self.code} | {self.description}"
