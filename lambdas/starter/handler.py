import json
import logging
import os
from datetime import datetime, timezone

# Configurar logging
logger = logging.getLogger()


def _log_level(name):
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


logger.setLevel(_log_level(os.getenv("LOG_LEVEL", "INFO")))

MESSAGE = "Hello World from serverless starter template!"
DEFAULT_STAGE = "dev"

HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "OPTIONS,POST,GET",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_stage(environ=None) -> str:
    """Return the deployment stage, falling back to ``dev`` when unset or empty."""
    environ = os.environ if environ is None else environ
    return environ.get("STAGE") or DEFAULT_STAGE


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ISO-8601 UTC with millisecond precision, e.g. 2025-07-26T15:26:56.168Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_body(stage: str, timestamp: str) -> str:
    payload = {"message": MESSAGE, "timestamp": timestamp, "stage": stage}
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def build_response(stage: str, clock=utc_now) -> dict:
    """
    Respuesta de la plantilla:
      1. statusCode siempre 200.
      2. Cabeceras JSON + CORS fijas.
      3. body serializado con message, timestamp y stage.
    """
    return {
        "statusCode": 200,
        "headers": dict(HEADERS),
        "body": build_body(stage, format_timestamp(clock())),
    }


def handler(event, context):
    logger.info("Evento recibido: %s", event)
    stage = resolve_stage()
    logger.info(f"Stage: {stage}")
    return build_response(stage)
