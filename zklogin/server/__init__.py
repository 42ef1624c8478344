"""
Entry point for the zkLogin backend.
"""

import logging

import uvicorn

from zklogin.common.config import Config

from .core import ZkLoginServer


def start_server(config: Config | None = None) -> None:
    """Start the zkLogin backend."""
    if config is None:
        config = Config()
    logging.basicConfig(level=config.LOG_LEVEL)
    server = ZkLoginServer(config=config)
    uvicorn.run(server.app, host=server.server_host, port=server.server_port)
