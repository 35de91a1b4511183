import os
import logging
import secrets
from pathlib import Path
from flask import Flask, request, jsonify
from pydantic import ValidationError
from judge.config import SANDBOX_TOKEN, get_sandbox_config
from judge.meta import ExecutionRequest
from judge.pipeline import CodeSandbox

LOG_DIR = Path(os.getenv("SANDBOX_LOG_DIR", "logs"))
LOG_DIR.mkdir(exist_ok=True)
logging.basicConfig(
    filename=str(LOG_DIR / "sandbox.log"),
    level=logging.DEBUG,
)
app = Flask(__name__)
if __name__ != "__main__":
    # let flask app use gunicorn's logger
    gunicorn_logger = logging.getLogger("gunicorn.error")
    app.logger.handlers = gunicorn_logger.handlers
    app.logger.setLevel(gunicorn_logger.level)
    logging.getLogger().setLevel(gunicorn_logger.level)

    # Allow overriding log level via environment variable
    if os.getenv("SANDBOX_DEBUG", "").lower() == "true":
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger().setLevel(logging.DEBUG)
logger = app.logger

# setup sandbox pipeline
SANDBOX_CONFIG = get_sandbox_config(os.getenv("SANDBOX_CONFIG"))
SANDBOX = CodeSandbox.from_config(SANDBOX_CONFIG)


def _error(msg: str, code: int):
    return jsonify({
        "status": "err",
        "msg": msg,
        "data": None,
    }), code


@app.get("/health")
def health():
    return "ok", 200


@app.post("/execute")
def execute():
    if SANDBOX_TOKEN:
        token = request.headers.get("X-Sandbox-Token") or request.args.get(
            "token", "")
        if not secrets.compare_digest(token, SANDBOX_TOKEN):
            logger.debug("get invalid token")
            return _error("invalid token", 403)

    payload = request.get_json(silent=True)
    if payload is None:
        return _error("request body must be json", 400)
    try:
        execution_request = ExecutionRequest.model_validate(payload)
    except ValidationError as e:
        return _error(str(e), 400)

    logger.debug(
        f"execute request [language={execution_request.language.value}, "
        f"cases={len(execution_request.inputList)}]")
    response = SANDBOX.execute(execution_request)
    return jsonify({
        "status": "ok",
        "msg": "ok",
        "data": response.model_dump(mode="json"),
    })


@app.get("/status")
def status():
    ret = {
        "backend": SANDBOX.executor.name,
    }
    # if token is provided
    if SANDBOX_TOKEN and secrets.compare_digest(
            SANDBOX_TOKEN, request.args.get("token", "")):
        ret.update({
            "timeLimitMs": SANDBOX_CONFIG["time_limit_ms"],
            "containerMemLimit": SANDBOX_CONFIG["container_mem_limit"],
            "containerCpus": SANDBOX_CONFIG["container_cpus"],
            "image": SANDBOX_CONFIG["image"],
        })
    return jsonify(ret), 200


# for local debug
# if __name__ == "__main__":
#     app.run(host="0.0.0.0", port=5000, debug=True)
