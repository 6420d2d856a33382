"""FastAPI application exposing the probe, metrics and health endpoints."""

import logging
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest

from ..collectors.iperf3_collector import Iperf3Collector
from ..config.models import ExporterConfig
from ..probe.request import SCRAPE_TIMEOUT_HEADER, normalize_probe_request
from ..probe.runner import IperfRunner, Runner, check_iperf3_exists
from ..utils.logger import setup_logger
from ..utils.metrics import IPERF_ERRORS
from ..validation.errors import MultiError, ResolutionError
from ..version import __version__
from .landing import render_landing_page


RunnerFactory = Callable[[logging.Logger], Runner]


def create_app(
    config: ExporterConfig,
    logger: Optional[logging.Logger] = None,
    runner_factory: Optional[RunnerFactory] = None
) -> FastAPI:
    """
    Build the exporter application.

    Args:
        config: Exporter configuration
        logger: Logger instance; one is created from config if omitted
        runner_factory: Builds the probe runner for each scrape; defaults to
            an IperfRunner using config.iperf3_path

    Returns:
        FastAPI: Configured application
    """
    logger = logger or setup_logger("iperf3_exporter", config.log_level, config.log_format)

    if runner_factory is None:
        def runner_factory(log: logging.Logger) -> Runner:
            return IperfRunner(log, config.iperf3_path)

    app = FastAPI(title="iPerf3 Exporter", version=__version__, docs_url=None, redoc_url=None)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        logger.debug(
            "HTTP request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.time() - start) * 1000, 1),
                "remote_addr": request.client.host if request.client else None,
            }
        )
        return response

    # Sync handler: FastAPI runs it in a worker thread, one per scrape
    def probe(request: Request) -> Response:
        try:
            probe_config = normalize_probe_request(
                request.query_params,
                timeout_hint=request.headers.get(SCRAPE_TIMEOUT_HEADER),
                default_timeout=config.timeout,
                min_timeout=config.min_timeout,
                max_timeout=config.max_timeout,
            )
        except MultiError as e:
            logger.error(f"Invalid probe request: {e}")
            IPERF_ERRORS.inc()
            return PlainTextResponse(str(e), status_code=400)
        except ResolutionError as e:
            logger.error(f"Failed to resolve probe timeout: {e}")
            IPERF_ERRORS.inc()
            return PlainTextResponse(str(e), status_code=500)

        # Fresh registry per scrape: nothing is cached between requests
        registry = CollectorRegistry()
        registry.register(Iperf3Collector(probe_config, logger, runner_factory(logger)))

        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    def metrics() -> Response:
        return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)

    def health() -> PlainTextResponse:
        if not check_iperf3_exists(config.iperf3_path):
            logger.error("iperf3 command not found")
            return PlainTextResponse("iperf3 command not found\n", status_code=503)
        return PlainTextResponse("OK\n")

    def ready() -> PlainTextResponse:
        return PlainTextResponse("Ready\n")

    def index() -> HTMLResponse:
        return HTMLResponse(render_landing_page(config))

    app.add_api_route(config.probe_path, probe, methods=["GET"])
    app.add_api_route(config.metrics_path, metrics, methods=["GET"])
    app.add_api_route("/health", health, methods=["GET"])
    app.add_api_route("/ready", ready, methods=["GET"])
    app.add_api_route("/", index, methods=["GET"])

    return app
