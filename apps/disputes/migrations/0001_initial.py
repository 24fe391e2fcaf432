# Generated manually for disputes app

import uuid
from decimal import Decimal
import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ('OPEN', 'Open'),
    ('UNDER_INVESTIGATION', 'Under investigation'),
    ('RESOLVED', 'Resolved'),
    ('REJECTED', 'Rejected'),
    ('REFUNDED', 'Refunded'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('billing', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Dispute',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('reference', models.CharField(max_length=100)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('claimed_amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('reason', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('status', models.CharField(choices=STATUS_CHOICES, db_index=True, default='OPEN', max_length=24)),
                ('investigator', models.CharField(blank=True, max_length=64)),
                ('investigation_notes', models.TextField(blank=True)),
                ('investigation_started_at', models.DateTimeField(blank=True, null=True)),
                ('resolution_notes', models.TextField(blank=True)),
                ('resolved_by', models.CharField(blank=True, max_length=64)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('refunded_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('refunded_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('manufacturer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='disputes', to=settings.AUTH_USER_MODEL)),
                ('payment', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='dispute', to='billing.payment')),
            ],
            options={
                'db_table': 'disputes',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['manufacturer', 'status'], name='disputes_manufac_41b7c9_idx'),
                    models.Index(fields=['created_at'], name='disputes_created_e27a05_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DisputeTransition',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('from_status', models.CharField(blank=True, choices=STATUS_CHOICES, max_length=24)),
                ('to_status', models.CharField(choices=STATUS_CHOICES, max_length=24)),
                ('actor', models.CharField(max_length=64)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('dispute', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='transitions', to='disputes.dispute')),
            ],
            options={
                'db_table': 'dispute_transitions',
                'ordering': ['created_at'],
            },
        ),
    ]
