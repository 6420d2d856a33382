"""Main application entry point for the iperf3 exporter."""

import argparse
import sys
from typing import Any, Dict, List, Optional

import uvicorn

from .config.loader import ConfigLoader
from .config.models import ExporterConfig
from .config.settings import Settings
from .probe.runner import check_iperf3_exists, get_iperf_cmd
from .server.app import create_app
from .utils.logger import setup_logger
from .validation.validators import parse_duration
from .version import __version__


class ExporterApp:
    """
    Exporter application.

    Loads configuration, builds the HTTP application and serves it.
    """

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        """
        Initialize exporter application.

        Args:
            config_path: Path to YAML configuration file, or None for defaults
            overrides: Settings taking precedence over the file (CLI flags)
        """
        self.config_path = config_path
        self.config = self._load_config(overrides or {})
        self.logger = setup_logger("iperf3_exporter", self.config.log_level, self.config.log_format)
        self.app = create_app(self.config, self.logger)

    def _load_config(self, overrides: Dict[str, Any]) -> ExporterConfig:
        """
        Load and validate configuration.

        Returns:
            ExporterConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is invalid
        """
        bootstrap = setup_logger("iperf3_exporter", overrides.get("log_level") or Settings.log_level())
        try:
            if self.config_path:
                bootstrap.info(f"Loading configuration from {self.config_path}")
            return ConfigLoader.load(self.config_path, overrides)

        except FileNotFoundError:
            bootstrap.error(f"Configuration file not found: {self.config_path}")
            sys.exit(1)

        except Exception as e:
            bootstrap.error(f"Invalid configuration: {e}")
            sys.exit(1)

    def serve(self) -> None:
        """Run the HTTP server until interrupted."""
        iperf3_cmd = self.config.iperf3_path or get_iperf_cmd()
        if not check_iperf3_exists(iperf3_cmd):
            self.logger.warning(f"iperf3 binary '{iperf3_cmd}' not found, probes will fail until it is installed")

        host, port = self.config.host_port
        self.logger.info(
            "Starting iperf3 exporter",
            extra={
                "version": __version__,
                "listen_address": self.config.listen_address,
                "metrics_path": self.config.metrics_path,
                "probe_path": self.config.probe_path,
                "timeout": self.config.timeout,
            }
        )

        uvicorn.run(self.app, host=host, port=port, log_level=self.config.log_level.lower())


def _duration_arg(value: str) -> float:
    try:
        seconds = parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    if seconds <= 0:
        raise argparse.ArgumentTypeError("timeout must be greater than 0")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='iperf3-exporter',
        description='Prometheus exporter that probes targets with iperf3',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve with defaults on :9579
  iperf3-exporter

  # Custom listen address and probe timeout
  iperf3-exporter --web.listen-address=127.0.0.1:9579 --iperf3.timeout=45s

  # Use a config file
  iperf3-exporter --config config/config.yaml
        """
    )

    parser.add_argument(
        '--config',
        default=Settings.config_path(),
        help='Path to configuration file (default: IPERF3_EXPORTER_CONFIG env var, if set)'
    )
    parser.add_argument(
        '--web.listen-address',
        dest='listen_address',
        help='Address to listen on (default: 0.0.0.0:9579)'
    )
    parser.add_argument(
        '--web.telemetry-path',
        dest='metrics_path',
        help='Path under which to expose metrics (default: /metrics)'
    )
    parser.add_argument(
        '--web.probe-path',
        dest='probe_path',
        help='Path under which to expose the probe endpoint (default: /probe)'
    )
    parser.add_argument(
        '--iperf3.timeout',
        dest='timeout',
        type=_duration_arg,
        help='iperf3 run timeout when Prometheus sends none, e.g. 30s (default: 30s)'
    )
    parser.add_argument(
        '--iperf3.path',
        dest='iperf3_path',
        help='Path to the iperf3 binary (default: look up iperf3 on PATH)'
    )
    parser.add_argument(
        '--log.level',
        dest='log_level',
        type=str.upper,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )
    parser.add_argument(
        '--log.format',
        dest='log_format',
        choices=['json', 'text'],
        help='Output format of log messages (default: json)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    return parser


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect CLI values that override the config file."""
    overrides = {
        "listen_address": args.listen_address,
        "metrics_path": args.metrics_path,
        "probe_path": args.probe_path,
        "timeout": args.timeout,
        "iperf3_path": args.iperf3_path,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    if overrides["log_level"] is None and not args.config:
        overrides["log_level"] = Settings.log_level()
    return overrides


def main(argv: Optional[List[str]] = None):
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    args = build_parser().parse_args(argv)
    app = ExporterApp(config_path=args.config, overrides=build_overrides(args))
    app.serve()


if __name__ == '__main__':
    main()
