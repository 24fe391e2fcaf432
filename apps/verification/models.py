from django.db import models
from django.core.exceptions import ValidationError
from django.utils import timezone
import uuid


class Verdict(models.TextChoices):
    GENUINE = 'GENUINE', 'Genuine'
    CODE_ALREADY_USED = 'CODE_ALREADY_USED', 'Code already used'
    INVALID = 'INVALID', 'Invalid code'
    UNREGISTERED_PRODUCT = 'UNREGISTERED_PRODUCT', 'Unregistered product'
    SUSPICIOUS_PATTERN = 'SUSPICIOUS_PATTERN', 'Suspicious pattern'


class TrustDecision(models.TextChoices):
    SAFE_TO_USE = 'SAFE_TO_USE', 'Safe to use'
    VERIFY_WITH_SELLER = 'VERIFY_WITH_SELLER', 'Verify with seller'
    DO_NOT_USE = 'DO_NOT_USE', 'Do not use'
    REPORT_SUSPECTED_COUNTERFEIT = 'REPORT_SUSPECTED_COUNTERFEIT', 'Report suspected counterfeit'


class VerificationLog(models.Model):
    """
    One row per classification call, whatever the verdict.

    Append-only: rows are never updated or deleted. Hotspot and trend
    analytics read nothing else.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Normalized value as submitted; kept even when no code matched
    code_value = models.CharField(max_length=64, db_index=True)
    code = models.ForeignKey(
        'codes.Code',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='verification_logs'
    )

    verdict = models.CharField(max_length=24, choices=Verdict.choices)
    # Verdict before the suspicious overlay was applied
    base_verdict = models.CharField(max_length=24, choices=Verdict.choices)
    risk_score = models.PositiveSmallIntegerField(default=0)
    trust_decision = models.CharField(max_length=32, choices=TrustDecision.choices)
    advisories = models.JSONField(default=list, blank=True)

    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='verification_logs'
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = 'verification_logs'
        indexes = [
            models.Index(fields=['code', 'created_at'], name='verificatio_code_id_3c81f2_idx'),
            models.Index(fields=['verdict', 'created_at'], name='verificatio_verdict_8d4e17_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code_value}: {self.verdict}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError('Verification log entries are immutable.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError('Verification log entries cannot be deleted.')
