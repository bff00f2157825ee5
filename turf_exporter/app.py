"""Custom Flask application class with container reference."""

from typing import TYPE_CHECKING

from flask import Flask

if TYPE_CHECKING:
    from turf_exporter.services.container import ServiceContainer


class App(Flask):
    """Custom Flask application with typed container attribute."""

    container: "ServiceContainer"
