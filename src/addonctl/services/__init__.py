"""Service layer: registry, loader, lifecycle, broadcasting, and the host facade.

Services may import from domain, infrastructure, listeners, and the
logging helpers in config.
They must never import from commands or output.
"""
