#!/usr/bin/env python3
"""
Sigue los logs de la lambda starter en LocalStack (CloudWatch Logs).

Escribe a consola y a un fichero con rotación; en modo --follow termina solo
tras --idle-exit segundos sin eventos nuevos o al alcanzar --max-seconds.
"""
import argparse
import logging
import os
import time
from logging.handlers import RotatingFileHandler

import boto3
from botocore.exceptions import ClientError, EndpointConnectionError

FUNCTION_NAME = os.environ.get("STARTER_FUNCTION_NAME", "starter")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Tail the starter lambda CloudWatch Logs in LocalStack.")
    p.add_argument("--log-group", default=f"/aws/lambda/{FUNCTION_NAME}")
    p.add_argument("--since-seconds", type=int, default=60, help="How far back the first read starts")
    p.add_argument("--follow", action="store_true", help="Keep polling for new events")
    p.add_argument("--idle-exit", type=int, default=10, help="Stop following after N quiet seconds")
    p.add_argument("--max-seconds", type=int, default=0, help="Stop following after N seconds (0 = never)")
    p.add_argument("--output-file", default=f"logs/{FUNCTION_NAME}.log")
    p.add_argument("--max-bytes", type=int, default=2_000_000, help="Size that triggers a file rotation")
    p.add_argument("--backup-count", type=int, default=5, help="Rotated files kept on disk")
    return p.parse_args(argv)


def ensure_logger(path, max_bytes, backup_count):
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("%(message)s"))
    rotating = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    rotating.setFormatter(logging.Formatter("%(asctime)s %(message)s", "%Y-%m-%d %H:%M:%S"))

    tail = logging.getLogger("tail")
    tail.handlers.clear()
    tail.propagate = False
    tail.setLevel(logging.INFO)
    for h in (console, rotating):
        tail.addHandler(h)
    return tail


def client():
    return boto3.client(
        "logs",
        endpoint_url=os.environ.get("AWS_ENDPOINT", "http://localhost:4566"),
        region_name=os.environ.get("REGION", "us-east-1"),
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


def print_events(cw, group, start_ms, logger):
    """Lee todas las páginas desde start_ms; devuelve el próximo start_ms y cuántos eventos salieron."""
    pages = cw.get_paginator("filter_log_events").paginate(logGroupName=group, startTime=start_ms)
    seen = []
    for page in pages:
        for event in page.get("events", []):
            logger.info(f"[{event['timestamp']}] {event['message'].rstrip()}")
            seen.append(event["timestamp"])
    newest = max(seen, default=start_ms - 1)
    return max(newest + 1, start_ms), len(seen)


def follow(cw, args, logger, start_ms, sleep=time.sleep, now=time.time):
    started = last_event_at = now()
    while True:
        elapsed = now()
        if args.max_seconds and elapsed - started >= args.max_seconds:
            break
        if elapsed - last_event_at >= args.idle_exit:
            break
        sleep(1)
        start_ms, printed = print_events(cw, args.log_group, start_ms, logger)
        if printed:
            last_event_at = now()
    return start_ms


def main(argv=None):
    args = parse_args(argv)
    logger = ensure_logger(args.output_file, args.max_bytes, args.backup_count)
    cw = client()

    start_ms = int((time.time() - args.since_seconds) * 1000)
    try:
        start_ms, _ = print_events(cw, args.log_group, start_ms, logger)
        if args.follow:
            follow(cw, args, logger, start_ms)
    except KeyboardInterrupt:
        pass
    except cw.exceptions.ResourceNotFoundException:
        logger.error(f"Log group {args.log_group} no existe (¿la lambda se ha invocado?)")
        return 1
    except (ClientError, EndpointConnectionError) as e:
        logger.error(f"Error al leer CloudWatch Logs: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
