#!/usr/bin/env python3
"""
Startup script for the StreamWatch background service
"""

import uvicorn
import sys
import socket
import argparse
from pathlib import Path


def is_port_in_use(port: int) -> bool:
    """Check if a port is already in use"""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(('localhost', port)) == 0


def find_free_port(start_port: int = 8000, max_attempts: int = 10) -> int:
    """Find a free port starting from start_port"""
    for port in range(start_port, start_port + max_attempts):
        if not is_port_in_use(port):
            return port
    raise RuntimeError(f"Could not find a free port in range {start_port}-{start_port + max_attempts - 1}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Start the StreamWatch background service")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: ./config.yaml if present)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run the server on (default: from config, 8000)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind to (default: from config, 127.0.0.1)"
    )
    parser.add_argument(
        "--auto-port",
        action="store_true",
        help="Automatically find a free port if the specified port is in use"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    args = parser.parse_args()

    # Add project root to path
    project_root = Path(__file__).parent
    sys.path.insert(0, str(project_root))

    from config import load_config
    from logger import setup_logging
    from webui.services.background_service import get_service

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    logger = setup_logging(config.logging.log_file, args.verbose or config.logging.verbose)
    get_service(config)

    host = args.host or config.server.host
    port = args.port or config.server.port
    if is_port_in_use(port):
        if args.auto_port:
            new_port = find_free_port(port)
            print(f"Port {port} is in use, using port {new_port} instead")
            port = new_port
        else:
            print(f"ERROR: Port {port} is already in use!")
            print(f"\nOptions:")
            print(f"  1. Use a different port:")
            print(f"     python start_webui.py --port {port + 1}")
            print(f"  2. Auto-find a free port:")
            print(f"     python start_webui.py --auto-port")
            sys.exit(1)

    logger.info(f"Starting StreamWatch background service on http://{host}:{port}")
    logger.info(f"API Docs: http://{host}:{port}/docs")

    from webui.main import app
    uvicorn.run(app, host=host, port=port)
