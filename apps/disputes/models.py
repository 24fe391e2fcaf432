from django.db import models
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class DisputeStatus(models.TextChoices):
    OPEN = 'OPEN', 'Open'
    UNDER_INVESTIGATION = 'UNDER_INVESTIGATION', 'Under investigation'
    RESOLVED = 'RESOLVED', 'Resolved'
    REJECTED = 'REJECTED', 'Rejected'
    REFUNDED = 'REFUNDED', 'Refunded'


TERMINAL_STATUSES = frozenset({
    DisputeStatus.RESOLVED,
    DisputeStatus.REJECTED,
    DisputeStatus.REFUNDED,
})


class Dispute(models.Model):
    """
    A manufacturer's challenge against one billing Payment.

    ``payment`` is one-to-one, so the database refuses a second dispute for
    the same payment. ``reference`` and ``amount`` are copied from the
    payment at creation and never follow later payment changes.

    Status only moves through the conditional updates in
    ``apps.disputes.services``; disputes are never deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    payment = models.OneToOneField(
        'billing.Payment',
        on_delete=models.PROTECT,
        related_name='dispute'
    )
    manufacturer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='disputes'
    )

    # Snapshot of the payment at creation
    reference = models.CharField(max_length=100)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    claimed_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    reason = models.CharField(max_length=200)
    description = models.TextField()

    status = models.CharField(
        max_length=24,
        choices=DisputeStatus.choices,
        default=DisputeStatus.OPEN,
        db_index=True
    )

    # Investigation
    investigator = models.CharField(max_length=64, blank=True)
    investigation_notes = models.TextField(blank=True)
    investigation_started_at = models.DateTimeField(null=True, blank=True)

    # Outcome
    resolution_notes = models.TextField(blank=True)
    resolved_by = models.CharField(max_length=64, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'disputes'
        indexes = [
            models.Index(fields=['manufacturer', 'status'], name='disputes_manufac_41b7c9_idx'),
            models.Index(fields=['created_at'], name='disputes_created_e27a05_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"Dispute {self.reference} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def delete(self, *args, **kwargs):
        raise ValidationError('Disputes are financial records and cannot be deleted.')


class DisputeTransition(models.Model):
    """Append-only audit row, one per status change (creation included)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    dispute = models.ForeignKey(
        Dispute,
        on_delete=models.PROTECT,
        related_name='transitions'
    )
    # Blank for the creation row
    from_status = models.CharField(max_length=24, choices=DisputeStatus.choices, blank=True)
    to_status = models.CharField(max_length=24, choices=DisputeStatus.choices)
    actor = models.CharField(max_length=64)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'dispute_transitions'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.from_status or '-'} -> {self.to_status} by {self.actor}"
