import hmac
import json
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from reporting.config import ReportSettings, load_settings
from reporting.db import TransactionStore, build_pool
from reporting.errors import MissingCredential, Unauthorized, UpstreamRejected
from reporting.logger import get_logger
from reporting.models import OutboundMessage, ReportWindow
from reporting.secrets import get_telegram_secrets
from reporting.summary import build_message, grand_total
from reporting.telegram_client import TelegramClient

logger = get_logger("send_report")

SECRET_HEADERS = ("x-secret-token", "x-secret")
SECRET_QUERY_PARAM = "secret"


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str, ensure_ascii=False),
    }


def _header(event: Mapping[str, Any], name: str) -> Optional[str]:
    # HTTP API v2 lowercases header names; REST API v1 does not.
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _secret_matches(presented: Optional[str], expected: str) -> bool:
    if not presented:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


class ReportHandler:
    """
    Authenticate -> query -> aggregate -> format -> deliver.

    Collaborators are injected; from_env() wires the real ones once per
    container and the pool is reused by every invocation after that.
    """

    def __init__(
        self,
        settings: ReportSettings,
        store: TransactionStore,
        telegram: TelegramClient,
        clock=None,
    ):
        self.settings = settings
        self.store = store
        self.telegram = telegram
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReportHandler":
        settings = load_settings(environ)
        return cls(
            settings=settings,
            store=TransactionStore(build_pool(settings)),
            telegram=TelegramClient(settings.telegram_api_base),
        )

    def authorize(self, event: Mapping[str, Any]) -> None:
        expected = self.settings.cron_secret
        if not expected:
            # No secret configured: the endpoint is open.
            return

        header_secret = None
        for name in SECRET_HEADERS:
            header_secret = _header(event, name)
            if header_secret:
                break
        query_secret = (event.get("queryStringParameters") or {}).get(SECRET_QUERY_PARAM)

        if not (_secret_matches(header_secret, expected) or _secret_matches(query_secret, expected)):
            raise Unauthorized()

    def telegram_credentials(self) -> Tuple[str, str]:
        bot_token = self.settings.bot_token
        chat_id = self.settings.chat_id

        if (not bot_token or not chat_id) and self.settings.telegram_secret_name:
            secret = get_telegram_secrets(
                self.settings.telegram_secret_name, self.settings.aws_region
            )
            bot_token = bot_token or secret.get("bot_token")
            chat_id = chat_id or secret.get("chat_id")

        if not bot_token or not chat_id:
            raise MissingCredential("BOT_TOKEN or CHAT_ID missing")

        return bot_token, str(chat_id)

    def deliver(self, text: str) -> Dict[str, Any]:
        bot_token, chat_id = self.telegram_credentials()
        reply = self.telegram.send_message(bot_token, OutboundMessage(chat_id=chat_id, text=text))

        if not isinstance(reply, dict) or not reply.get("ok"):
            logger.error("report.telegram_error", extra={"fields": {"telegram": reply}})
            raise UpstreamRejected(reply)

        return reply

    def handle(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            # 1) Shared-secret check
            self.authorize(event)

            # 2) Window; `since` is reported but not used to filter the query
            window = ReportWindow.ending_at(self.settings.window_hours, self._clock())
            logger.info(
                "report.window",
                extra={"fields": {"hours": window.hours, "since": window.since.isoformat()}},
            )

            # 3) Aggregate
            rows = self.store.fetch_success_totals()
            logger.info(
                "report.query_done",
                extra={"fields": {"groups": len(rows), "grand_total": str(grand_total(rows))}},
            )

            # 4) Format and deliver
            text = build_message(rows, window.hours)
            reply = self.deliver(text)

            logger.info("report.sent", extra={"fields": {"groups": len(rows)}})
            return _response(200, {"ok": True, "sent": True, "telegram": reply.get("result")})

        except Unauthorized:
            logger.warning("report.unauthorized")
            return _response(401, {"ok": False, "error": "Unauthorized"})

        except UpstreamRejected as e:
            return _response(e.status_code, {"ok": False, "telegram": e.payload})

        except Exception as e:
            logger.error(
                "report.handler_error",
                exc_info=True,
                extra={"fields": {"error": str(e)}},
            )
            return _response(500, {"ok": False, "error": str(e)})


# Built once per container; pool and HTTP session are reused across warm invocations
handler = ReportHandler.from_env()


def _request_method(event: Mapping[str, Any]) -> Optional[str]:
    # HTTP API v2 keeps it under requestContext.http; REST API v1 at the top level
    http = (event.get("requestContext") or {}).get("http") or {}
    return http.get("method") or event.get("httpMethod")


def lambda_handler(event, context):
    if not isinstance(event, dict):
        # Bare direct invocation: no headers or query string to read
        event = {}

    logger.info(
        "report.lambda_start",
        extra={
            "fields": {
                "request_id": getattr(context, "aws_request_id", None),
                "method": _request_method(event),
            }
        },
    )
    return handler.handle(event)
