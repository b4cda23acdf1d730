from django.contrib import admin
from .models import Account, Company, Worker


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "email",
        "role",
        "company",
        "status",
        "chat_id",
        "created_at",
    )
    search_fields = ("name", "email", "company")
    list_filter = ("role", "status")
    date_hierarchy = "created_at"
    exclude = ("password",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "owner", "status", "created_at")
    search_fields = ("name", "email")
    list_filter = ("status",)


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ("account", "company", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("account__name", "account__email", "company__name")
