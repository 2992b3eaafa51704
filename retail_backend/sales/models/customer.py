# sales/models/customer.py

import uuid

from django.db import models


class Customer(models.Model):
    """
    Minimal customer reference carried on sales, returns and store credit.
    Customer management (CRM, addresses, tags) lives outside this service.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
