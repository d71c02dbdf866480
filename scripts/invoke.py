#!/usr/bin/env python3
"""
Invoca la lambda starter.

  --local   ejecuta lambdas/starter/handler.py en proceso con un evento GET /test.
  (default) invoca la función desplegada en LocalStack con boto3.
"""
import argparse
import importlib.util
import json
import logging
import os
import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError, EndpointConnectionError

HANDLER_PATH = Path(__file__).resolve().parents[1] / "lambdas/starter/handler.py"

logger = logging.getLogger("invoke")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Invoke the starter lambda locally or on LocalStack.")
    p.add_argument(
        "--function",
        default=os.environ.get("STARTER_FUNCTION_NAME", "starter"),
        help="Deployed function name (remote mode)",
    )
    p.add_argument("--payload", default=None, help="JSON event; defaults to an API Gateway GET /test event")
    p.add_argument("--local", action="store_true", help="Run the handler in-process instead of on LocalStack")
    p.add_argument("--stage", default=None, help="STAGE for --local runs (defaults to the environment)")
    return p.parse_args(argv)


def apigw_test_event():
    return {
        "resource": "/test",
        "path": "/test",
        "httpMethod": "GET",
        "headers": {},
        "queryStringParameters": None,
        "requestContext": {"resourcePath": "/test", "httpMethod": "GET", "stage": "local"},
        "body": None,
        "isBase64Encoded": False,
    }


def load_handler(path=HANDLER_PATH):
    spec = importlib.util.spec_from_file_location("starter_handler", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)  # type: ignore
    return module


def invoke_local(event, stage=None):
    module = load_handler()
    if stage is None:
        return module.handler(event, None)
    return module.build_response(stage)


def client():
    return boto3.client(
        "lambda",
        endpoint_url=os.environ.get("AWS_ENDPOINT", "http://localhost:4566"),
        region_name=os.environ.get("REGION", "us-east-1"),
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


def invoke_remote(function_name, event):
    """Devuelve (status_code, function_error, payload decodificado)."""
    resp = client().invoke(FunctionName=function_name, Payload=json.dumps(event).encode())
    raw = resp["Payload"].read().decode()
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        payload = raw
    return resp["StatusCode"], resp.get("FunctionError"), payload


def print_result(status, function_error, payload):
    print(status, function_error)
    if isinstance(payload, dict) and isinstance(payload.get("body"), str):
        try:
            payload = dict(payload, body=json.loads(payload["body"]))
        except json.JSONDecodeError:
            pass
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    a = parse_args(argv)
    try:
        event = json.loads(a.payload) if a.payload else apigw_test_event()
    except json.JSONDecodeError as e:
        logger.error(f"--payload no es JSON válido: {e}")
        return 2

    if a.local:
        print_result(200, None, invoke_local(event, a.stage))
        return 0

    if a.stage is not None:
        logger.error("--stage solo aplica a --local; el stage remoto es configuración de la función")
        return 2

    try:
        status, function_error, payload = invoke_remote(a.function, event)
    except EndpointConnectionError as e:
        logger.error(f"No se pudo conectar a LocalStack: {e}")
        return 1
    except ClientError as e:
        logger.error(f"Error al interactuar con AWS: {e}")
        return 1

    print_result(status, function_error, payload)
    return 1 if function_error else 0


if __name__ == "__main__":
    sys.exit(main())
