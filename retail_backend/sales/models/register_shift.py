# sales/models/register_shift.py

import uuid

from django.conf import settings
from django.db import models


class RegisterShift(models.Model):
    """
    A cashier shift on a physical register.
    Every POS sale is booked against the shift it was rung up on.
    """

    STATUS_OPEN = "open"
    STATUS_CLOSED = "closed"

    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_CLOSED, "Closed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    register_name = models.CharField(max_length=64)

    opened_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="register_shifts",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_OPEN)

    opened_at = models.DateTimeField(auto_now_add=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-opened_at"]

    def __str__(self):
        return f"{self.register_name} | {self.status}"
