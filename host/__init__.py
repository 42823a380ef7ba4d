from .server import ClientSession, HostServer

__all__ = ["ClientSession", "HostServer"]
