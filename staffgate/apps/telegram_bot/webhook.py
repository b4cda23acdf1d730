import json
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from .bot import TelegramBot
from .messages import parse_telegram_update

logger = logging.getLogger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


@csrf_exempt
def telegram_webhook(request):
    """Process one Telegram update; always answer with a JSON status body."""
    if request.method != "POST":
        return HttpResponse(status=405)

    secret = settings.TELEGRAM_WEBHOOK_SECRET
    if secret and request.headers.get(SECRET_HEADER) != secret:
        logger.warning("[webhook] Rejected update with a bad secret token")
        return JsonResponse({"status": "error"}, status=403)

    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        logger.warning("[webhook] Body is not JSON")
        return JsonResponse({"status": "error"}, status=400)

    try:
        update = parse_telegram_update(data)
        if update:
            logger.info(
                f"[webhook] Update {update.update_id} from chat {update.chat_id}"
                f" ({'callback' if update.is_callback else 'message'})"
            )
            TelegramBot().handle_update(update)
        else:
            logger.info("[webhook] Ignoring unsupported payload")
    except Exception:  # never break Telegram retries with a malformed answer
        logger.exception("[webhook] Error while processing update")
        return JsonResponse({"status": "error"}, status=500)

    return JsonResponse({"status": "success"})
