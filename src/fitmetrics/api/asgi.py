"""ASGI entrypoint for the FitMetrics sync API."""

from fitmetrics.api.app import create_app
from fitmetrics.containers import build_container

app = create_app(build_container())
