"""
Transaction Summary Report
==========================

Helpers for the scheduled Lambda that sums successful payments per
merchant and posts the summary to a Telegram chat.

- config.py           → environment settings (DB, shared secret, window, Telegram)
- db.py               → PyMySQL pool and the aggregation query
- summary.py          → grand total and en_IN message rendering
- telegram_client.py  → Bot API sendMessage over requests
- secrets.py          → optional Telegram credentials from Secrets Manager
- logger.py           → structured JSON logging
- errors.py           → failures mapped onto HTTP status codes

Environment variables expected:
  • DATABASE_URL or MYSQL_HOST/USER/PASSWORD/DATABASE/PORT
  • CRON_SECRET               - shared secret (empty disables the check)
  • REPORT_WINDOW_HOURS       - report window, default 1
  • BOT_TOKEN, CHAT_ID        - Telegram delivery
  • TELEGRAM_SECRET_NAME      - optional Secrets Manager fallback for the above
  • LOG_LEVEL                 - log verbosity (default: INFO)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
