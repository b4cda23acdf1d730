from django.apps import AppConfig


class TelegramBotConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "staffgate.apps.telegram_bot"
    verbose_name = "Telegram Bot"

    def ready(self):
        # Step handlers register themselves on import
        from staffgate.apps.telegram_bot import steps  # noqa: F401
