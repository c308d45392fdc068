"""
Remote stash fetch clients.
"""
from .client import ContainerFetcher, HttpContainerFetcher

__all__ = ["ContainerFetcher", "HttpContainerFetcher"]
