from django.db import models
from django.core.exceptions import ValidationError
import uuid


class Product(models.Model):
    """A manufacturer's product line. The owner never changes."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    manufacturer = models.ForeignKey(
        'accounts.User',
        on_delete=models.PROTECT,
        related_name='products'
    )
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    # Withdrawn products keep their codes, but they no longer verify as genuine
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        indexes = [
            models.Index(fields=['manufacturer', 'is_active'], name='products_manufac_5a1c3e_idx'),
        ]
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.category})"


class Batch(models.Model):
    """A manufacturing run of a product; codes are issued under it."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name='batches'
    )
    batch_number = models.CharField(max_length=64)
    production_date = models.DateField()
    expiry_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'batches'
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'batch_number'],
                name='unique_batch_number_per_product'
            ),
        ]
        indexes = [
            models.Index(fields=['expiry_date'], name='batches_expiry__2f8b61_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.product.name} #{self.batch_number}"

    def clean(self):
        if self.expiry_date and self.production_date and self.expiry_date <= self.production_date:
            raise ValidationError({'expiry_date': 'Expiry date must be after production date'})

    @property
    def manufacturer_id(self):
        return self.product.manufacturer_id

    def has_active_recall(self):
        return self.recalls.filter(status=RecallStatus.ACTIVE).exists()

    def is_expired(self, on_date):
        return self.expiry_date < on_date


class RecallStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    CLOSED = 'closed', 'Closed'


class BatchRecall(models.Model):
    """Manufacturer-initiated withdrawal of a batch from the market."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    batch = models.ForeignKey(
        Batch,
        on_delete=models.PROTECT,
        related_name='recalls'
    )
    reason = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=10,
        choices=RecallStatus.choices,
        default=RecallStatus.ACTIVE
    )

    initiated_at = models.DateTimeField(auto_now_add=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'batch_recalls'
        indexes = [
            models.Index(fields=['batch', 'status'], name='batch_recal_batch_i_9d0a4f_idx'),
        ]
        ordering = ['-initiated_at']

    def __str__(self):
        return f"Recall of {self.batch} ({self.status})"


class Code(models.Model):
    """
    Single-use verification code bound to one physical product unit.

    ``value`` is unique across the whole system (database constraint).
    ``is_used`` only ever moves from False to True, through the conditional
    update in the verification classifier. Codes are never deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    value = models.CharField(max_length=32, unique=True)
    batch = models.ForeignKey(
        Batch,
        on_delete=models.PROTECT,
        related_name='codes'
    )

    # Storage-relative path of the QR artifact, e.g. qr_codes/LUM-XXXX.png
    qr_image_path = models.CharField(max_length=200)

    # Redemption state
    is_used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)
    used_latitude = models.FloatField(null=True, blank=True)
    used_longitude = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'codes'
        indexes = [
            models.Index(fields=['batch', 'is_used'], name='codes_batch_i_7e3b20_idx'),
        ]
        ordering = ['created_at']

    def __str__(self):
        return f"{self.value} ({'used' if self.is_used else 'unused'})"

    def delete(self, *args, **kwargs):
        raise ValidationError('Codes are permanent audit artifacts and cannot be deleted.')
