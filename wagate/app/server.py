from __future__ import annotations

import argparse
import logging
import pathlib

from flask import Flask, jsonify, render_template, request

from wagate.defaults.config import GatewayConfig, config_from_env
from wagate.infra.logger import get_logger

from .facade import GatewayFacade, Reply, RuntimeLike
from .runtime import GatewayRuntime

logger = logging.getLogger(__name__)


def _template_dir() -> str:
    return str(pathlib.Path(__file__).with_name("templates"))


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _respond(reply: Reply):
    return jsonify(reply.body), reply.status


def create_app(
    *,
    testing: bool = False,
    runtime: RuntimeLike | None = None,
    config: GatewayConfig | None = None,
) -> Flask:
    app = Flask(__name__, template_folder=_template_dir())
    app.config["TESTING"] = testing
    if runtime is None:
        gateway_config = config or config_from_env()
        gateway_runtime = GatewayRuntime(
            session_name=gateway_config.session_name,
            call_timeout_s=gateway_config.call_timeout_s,
        )
        gateway_runtime.start()
        runtime = gateway_runtime
    app.config["GATEWAY_RUNTIME"] = runtime
    facade = GatewayFacade(runtime)

    @app.get("/qr")
    def qr():
        state = facade.state()
        return render_template("qr.html", ready=state.ready, qr_image=state.qr_image)

    @app.get("/status")
    def status():
        return _respond(facade.status())

    @app.post("/send-to-group")
    def send_to_group():
        return _respond(facade.send_to_group(_json_body()))

    @app.get("/groups")
    def groups():
        return _respond(facade.list_groups())

    @app.post("/logout")
    def logout():
        return _respond(facade.logout())

    return app


def _parse_args(config: GatewayConfig) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the WhatsApp group messaging gateway.")
    parser.add_argument("--host", default=config.host)
    parser.add_argument("--port", default=config.port, type=int)
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args()


def main() -> None:
    config = config_from_env()
    args = _parse_args(config)
    config.host = args.host
    config.port = args.port
    get_logger("wagate", config.log_level)
    app = create_app(config=config)
    logger.info("server running on http://localhost:%s", config.port)
    logger.info("scan QR at http://localhost:%s/qr", config.port)
    app.run(host=config.host, port=config.port, debug=args.debug, use_reloader=False)


if __name__ == "__main__":
    main()
