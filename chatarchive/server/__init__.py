"""
HTTP server for Chat Archive.
"""

from .application_server import ApplicationServer
from .main import create_app
from .service_container import ServiceContainer

__all__ = ["create_app", "ApplicationServer", "ServiceContainer"]
