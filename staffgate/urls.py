from django.contrib import admin
from django.http import JsonResponse
from django.urls import path

from staffgate.apps.telegram_bot.webhook import telegram_webhook


def health_check(request):
    return JsonResponse({"status": "ok"})


urlpatterns = [
    path("admin/", admin.site.urls),
    path("webhook/telegram/", telegram_webhook, name="telegram-webhook"),
    path("healthz", health_check, name="healthz"),
]
