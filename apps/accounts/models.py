from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
import uuid


class UserRole(models.TextChoices):
    MANUFACTURER = 'manufacturer', 'Manufacturer'
    CONSUMER = 'consumer', 'Consumer'
    ADMIN = 'admin', 'Back-office Admin'


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', UserRole.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """Custom user model with email authentication and a platform role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255, db_index=True)
    display_name = models.CharField(max_length=100, blank=True)

    # Platform role (manufacturers mint codes, admins resolve disputes)
    role = models.CharField(
        max_length=20,
        choices=UserRole.choices,
        default=UserRole.CONSUMER,
        db_index=True,
    )
    company_name = models.CharField(max_length=200, blank=True)

    # Permissions
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    last_login = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email'], name='users_email_4b85f2_idx'),
            models.Index(fields=['created_at'], name='users_created_6541e9_idx'),
        ]

    def __str__(self):
        return self.email

    def get_display_name(self):
        """Return company name, display name or email prefix."""
        return self.company_name or self.display_name or self.email.split('@')[0]

    @property
    def is_manufacturer(self):
        return self.role == UserRole.MANUFACTURER

    @property
    def is_back_office(self):
        return self.role == UserRole.ADMIN or self.is_staff

    @property
    def actor_id(self):
        """Opaque identity string recorded on audit fields."""
        return str(self.id)
