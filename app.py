#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations
import os
import json
import logging
import socket
import platform
from typing import Dict, Any

from flask import Flask, request, Response, jsonify, make_response
from werkzeug.exceptions import HTTPException

from request_audit import __version__ as SERVICE_VERSION
from request_audit import build_request_audit, context_from_flask

SERVER_NAME = "request-audit"
LOG_RULE = "═" * 62

app = Flask(__name__)
app.json.sort_keys = False

# ----------------------------- Config -----------------------------

def _env_flag(name: str, default: str) -> bool:
    return (os.getenv(name, default) or default).strip() == "1"

def load_config() -> Dict[str, Any]:
    return {
        "HOST": os.getenv("HOST", "0.0.0.0"),
        "PORT": int(os.getenv("PORT", "3000") or "3000"),
        "TRUST_PROXY": _env_flag("TRUST_PROXY", "1"),
        "LOG_LEVEL": (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
        "LOG_AUDIT": _env_flag("LOG_AUDIT", "1"),
        "LOG_PRETTY": _env_flag("LOG_PRETTY", "1"),
    }

def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(getattr(logging, level, logging.INFO))

app.config.update(load_config())
configure_logging(app.config["LOG_LEVEL"])

# ----------------------------- Audit logging -----------------------------

def log_audit(payload: Dict[str, Any]) -> None:
    if not app.config.get("LOG_AUDIT", True):
        return
    if app.config.get("LOG_PRETTY", True):
        body = json.dumps(payload, ensure_ascii=False, indent=2)
        app.logger.info("\n%s\n  Incoming Request Audit\n%s\n%s\n%s", LOG_RULE, LOG_RULE, body, LOG_RULE)
    else:
        app.logger.info("audit %s", json.dumps(payload, ensure_ascii=False, separators=(",", ":")))

# ----------------------------- Errors -----------------------------

@app.errorhandler(HTTPException)
def http_error(exc: HTTPException):
    resp = make_response(jsonify({"error": {"status": exc.code, "name": exc.name, "description": exc.description}}), exc.code)
    resp.headers['Server'] = SERVER_NAME
    return resp

# ----------------------------- Endpoints -----------------------------

@app.route("/", methods=["GET","POST","PUT","PATCH","DELETE","HEAD","OPTIONS"])
def root():
    ctx = context_from_flask(request, trust_proxy=app.config.get("TRUST_PROXY", True))
    payload = build_request_audit(ctx).to_dict()
    log_audit(payload)
    resp = make_response(jsonify(payload))
    resp.headers['X-Request-Id'] = payload['meta']['requestId']
    resp.headers['Server'] = SERVER_NAME
    return resp

@app.route("/healthz", methods=["GET","HEAD"])
def healthz():
    return Response("ok", mimetype="text/plain")

if __name__ == "__main__":
    host, port = app.config["HOST"], app.config["PORT"]
    app.logger.info("Request audit API %s listening on http://%s:%s", SERVICE_VERSION, host, port)
    app.logger.info("Python %s | PID %s | Host %s", platform.python_version(), os.getpid(), socket.gethostname())
    app.run(host=host, port=port)
