"""CLI entry point for toolrelay.

This module provides the command-line interface for starting the toolrelay
server. It can be invoked as `toolrelay` (via the script entry point) or
`python -m toolrelay`.
"""

import argparse
import logging
import sys

import uvicorn

from toolrelay import __version__, create_app
from toolrelay.config import ToolRelaySettings


def main() -> None:
    """Main entry point for the toolrelay CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="toolrelay",
        description="Tool-calling orchestration engine for chat models",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"toolrelay {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLRELAY_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via TOOLRELAY_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via TOOLRELAY_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Default chat model (default: llama3.2:latest, can be set via TOOLRELAY_DEFAULT_MODEL)",
    )

    parser.add_argument(
        "--max-tool-iterations",
        type=int,
        default=None,
        help="Maximum tool-execution passes per turn (default: 10, can be set via TOOLRELAY_MAX_TOOL_ITERATIONS)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLRELAY_LOG_LEVEL)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.model is not None:
        settings_kwargs["default_model"] = args.model
    if args.max_tool_iterations is not None:
        settings_kwargs["max_tool_iterations"] = args.max_tool_iterations
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = ToolRelaySettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Create the FastAPI app
    app = create_app(settings=settings)

    # Start uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )


if __name__ == "__main__":
    sys.exit(main())
