"""
Payment records owned by the billing collaborator.

Payments are created by the payment-gateway integration after a verified
payment event. The dispute workflow only reads them; it snapshots the
reference and amount onto the dispute at creation time.
"""
from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class Payment(models.Model):
    """Verified manufacturer payment (subscription, code quota top-up)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    manufacturer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='payments'
    )

    # Gateway reference (unique per verified payment event)
    reference = models.CharField(max_length=100, unique=True)
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3, default='NGN')

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['manufacturer', 'created_at'], name='payments_manufac_0c7e1d_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.reference} - {self.amount} {self.currency}"
