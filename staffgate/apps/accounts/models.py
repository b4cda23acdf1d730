# staffgate/accounts/models.py
from django.db import models


class Role(models.TextChoices):
    HOLDER = "holder", "Company holder"
    EMPLOYEE = "employee", "Employee"
    ADMIN = "admin", "Admin"


class AccountStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class CompanyStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Account(models.Model):
    """Registered identity; created pending by the bot, decided by an approver."""

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    password = models.CharField(max_length=255)  # Django password hash
    chat_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    image = models.CharField(max_length=255, blank=True, default="")
    role = models.CharField(max_length=16, choices=Role.choices, db_index=True)
    company = models.CharField(max_length=255, blank=True, default="", db_index=True)
    status = models.CharField(
        max_length=16,
        choices=AccountStatus.choices,
        default=AccountStatus.PENDING,
        db_index=True,
    )
    email_verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} <{self.email}> ({self.role})"

    @property
    def is_pending(self) -> bool:
        return self.status == AccountStatus.PENDING


class Company(models.Model):
    name = models.CharField(max_length=255, unique=True)
    email = models.EmailField(max_length=254)
    owner = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="owned_company",
        limit_choices_to={"role": Role.HOLDER},
    )
    status = models.CharField(
        max_length=16, choices=CompanyStatus.choices, default=CompanyStatus.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "companies"

    def __str__(self):
        return self.name


class Worker(models.Model):
    """Employee membership of a company; status mirrors the linked account."""

    account = models.OneToOneField(
        Account,
        on_delete=models.CASCADE,
        related_name="worker",
        limit_choices_to={"role": Role.EMPLOYEE},
    )
    company = models.ForeignKey(
        Company, on_delete=models.CASCADE, related_name="workers"
    )
    status = models.CharField(
        max_length=16,
        choices=AccountStatus.choices,
        default=AccountStatus.PENDING,
        db_index=True,
    )
    image = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.account.name} @ {self.company.name}"
