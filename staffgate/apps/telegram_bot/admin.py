from django.contrib import admin
from .models import Step


@admin.register(Step)
class StepAdmin(admin.ModelAdmin):
    list_display = ("chat_id", "step", "role", "company_name", "email", "updated_at")
    list_filter = ("step", "role")
    search_fields = ("chat_id", "email", "company_name")
    exclude = ("password", "confirmation_code")
