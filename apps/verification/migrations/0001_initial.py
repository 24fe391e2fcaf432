import django.db.models.deletion
import django.utils.timezone
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('codes', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='VerificationLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('code_value', models.CharField(db_index=True, max_length=64)),
                ('verdict', models.CharField(choices=[('GENUINE', 'Genuine'), ('CODE_ALREADY_USED', 'Code already used'), ('INVALID', 'Invalid code'), ('UNREGISTERED_PRODUCT', 'Unregistered product'), ('SUSPICIOUS_PATTERN', 'Suspicious pattern')], max_length=24)),
                ('base_verdict', models.CharField(choices=[('GENUINE', 'Genuine'), ('CODE_ALREADY_USED', 'Code already used'), ('INVALID', 'Invalid code'), ('UNREGISTERED_PRODUCT', 'Unregistered product'), ('SUSPICIOUS_PATTERN', 'Suspicious pattern')], max_length=24)),
                ('risk_score', models.PositiveSmallIntegerField(default=0)),
                ('trust_decision', models.CharField(choices=[('SAFE_TO_USE', 'Safe to use'), ('VERIFY_WITH_SELLER', 'Verify with seller'), ('DO_NOT_USE', 'Do not use'), ('REPORT_SUSPECTED_COUNTERFEIT', 'Report suspected counterfeit')], max_length=32)),
                ('advisories', models.JSONField(blank=True, default=list)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('code', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='verification_logs', to='codes.code')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verification_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'verification_logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['code', 'created_at'], name='verificatio_code_id_3c81f2_idx'),
                    models.Index(fields=['verdict', 'created_at'], name='verificatio_verdict_8d4e17_idx'),
                ],
            },
        ),
    ]
