"""HTML landing page served at /."""

from html import escape

from ..config.models import ExporterConfig
from ..probe.request import ProbeDefaults
from ..version import __version__


PROBE_PARAMETERS = (
    ("target", "Target host to probe (required)", "-"),
    ("port", "Port that the target iperf3 server is listening on", str(ProbeDefaults.PORT)),
    ("reverse_mode", "Run iperf3 in reverse mode (server sends, client receives)", "false"),
    ("udp_mode", "Run iperf3 in UDP mode instead of TCP", "false"),
    ("bitrate", "Target bitrate in bits/sec (format: #[KMG][/#])", "1M for UDP, unlimited for TCP"),
    ("period", "Duration of the iperf3 test", "5s"),
)


def render_landing_page(config: ExporterConfig) -> str:
    """
    Render the landing page for config.

    Args:
        config: Exporter configuration (paths and listen address)

    Returns:
        str: HTML document
    """
    probe_path = escape(config.probe_path)
    metrics_path = escape(config.metrics_path)

    rows = "\n".join(
        f"<tr><td>{name}</td><td>{escape(description)}</td><td>{escape(default)}</td></tr>"
        for name, description, default in PROBE_PARAMETERS
    )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>iPerf3 Exporter</title>
<style>
table {{ border-collapse: collapse; width: 100%; }}
th, td {{ text-align: left; padding: 8px; border-bottom: 1px solid #ddd; }}
th {{ background-color: #f2f2f2; }}
pre {{ background-color: #f5f5f5; padding: 10px; border-radius: 5px; overflow-x: auto; }}
</style>
</head>
<body>
<h1>iPerf3 Exporter</h1>
<p>The iPerf3 exporter allows iPerf3 probing of endpoints for Prometheus monitoring.</p>
<p>Version: {escape(__version__)}</p>
<ul>
<li><a href="{metrics_path}">Metrics</a></li>
<li><a href="/health">Health</a></li>
</ul>

<h2>Quick Start</h2>
<p>To probe a target:</p>
<pre><a href="{probe_path}?target=example.com">{probe_path}?target=example.com</a></pre>

<h2>Probe Parameters</h2>
<table>
<tr><th>Parameter</th><th>Description</th><th>Default</th></tr>
{rows}
</table>

<h2>Prometheus Configuration Example</h2>
<pre>
scrape_configs:
  - job_name: 'iperf3'
    metrics_path: {probe_path}
    static_configs:
      - targets:
        - foo.server
        - bar.server
    params:
      port: ['5201']
      # udp_mode: ['true']
      # bitrate: ['100M']
      # period: ['10s']
    relabel_configs:
      - source_labels: [__address__]
        target_label: __param_target
      - source_labels: [__param_target]
        target_label: instance
      - target_label: __address__
        replacement: {escape(config.listen_address)}  # The exporter's real hostname:port.
</pre>
</body>
</html>
"""
