import logging

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from mail_notifier.config import get_settings
from mail_notifier.services.logging_config import configure_logging
from mail_notifier.services.telegram_client import TelegramClient
from mail_notifier.webhooks.email_handler import handle_inbound_email, verify_inbound_request

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

telegram_client = TelegramClient(
    settings.telegram_bot_token,
    api_base=settings.telegram_api_base,
    retry_max_attempts=settings.api_retry_max_attempts,
    retry_base_delay_seconds=settings.api_retry_base_delay_seconds,
    retry_max_delay_seconds=settings.api_retry_max_delay_seconds,
)

app = FastAPI(title="Email Transaction Notifier", version="0.1.0")


@app.on_event("startup")
def startup() -> None:
    if not (settings.telegram_bot_token and settings.telegram_chat_id):
        logger.warning(
            "Telegram is not configured; inbound email will be skipped",
            extra={"event": "telegram_not_configured"},
        )
    logger.info("Application startup complete", extra={"event": "startup_complete"})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}


@app.post("/webhooks/email")
async def email_webhook(
    request: Request,
    x_webhook_token: str = Header(default=""),
) -> JSONResponse:
    if not verify_inbound_request(settings, x_webhook_token):
        logger.warning("Rejected inbound email webhook token", extra={"event": "email_webhook_unauthorized"})
        raise HTTPException(status_code=401, detail="invalid webhook token")

    raw_message = await request.body()
    if not raw_message:
        raise HTTPException(status_code=400, detail="empty message body")

    logger.info("Received inbound email", extra={"event": "email_webhook_received", "size_bytes": len(raw_message)})
    try:
        result = await handle_inbound_email(raw_message, settings, telegram_client)
    except Exception as exc:
        logger.exception("Unhandled exception while processing inbound email", extra={"event": "email_webhook_error"})
        raise HTTPException(status_code=500, detail="email webhook processing error") from exc

    if result["status"] == "failed":
        raise HTTPException(status_code=502, detail=result["reason"])
    return JSONResponse(result)
