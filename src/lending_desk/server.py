"""Lending Desk MCP Server

Exposes the record store to MCP clients:
- Tools change state: catalog and roster entries, loan records, the edit lock
- Resources are read-only views: records, catalog, roster and totals

The store lives in process memory for as long as the server runs. On
startup it is optionally seeded with the sample catalog and roster, and
an overdue sweep brings record statuses up to date.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from lending_desk.config import AppConfig, get_config
from lending_desk.resources import all_resources, bind_resource
from lending_desk.store import RecordStore, create_store
from lending_desk.tools import all_tools, bind_tool

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Lending Desk MCP Server - tracks which borrower has which books. Use the "
    "resources to browse records, the catalog, the roster and totals. Use the tools "
    "to add or remove books and borrowers, open loan records, edit them (begin, "
    "commit or cancel; one record at a time), delete them and sweep overdue loans."
)


def configure_logging(config: AppConfig) -> None:
    # stdout carries the stdio transport, so logs go to stderr
    logging.basicConfig(
        level=logging.DEBUG if config.debug else config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    if not config.is_development:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


# =============================================================================
# MCP SERVER INITIALIZATION
# =============================================================================


def create_server(
    config: AppConfig | None = None, store: RecordStore | None = None
) -> FastMCP:
    """
    Build the FastMCP server with every tool and resource bound to ``store``.

    Args:
        config: Settings; defaults to the global configuration
        store: Record store to serve; a new one (seeded according to
            ``config.seed_sample_data``) is created when omitted

    Returns:
        The configured, not yet running, server
    """
    config = config or get_config()
    if store is None:
        store = create_store(seed=config.seed_sample_data)

    mcp = FastMCP(
        name=config.server_name,
        version=config.server_version,
        instructions=INSTRUCTIONS,
    )

    # =========================================================================
    # TOOL REGISTRATION
    # =========================================================================

    for tool in all_tools:
        logger.debug("Registering tool: %s", tool["name"])
        mcp.tool(
            name=tool["name"],
            description=tool["description"],
        )(bind_tool(tool, store))

    logger.info("Registered %d tools", len(all_tools))

    # =========================================================================
    # RESOURCE REGISTRATION
    # =========================================================================

    for resource in all_resources:
        mcp.resource(
            uri=resource["uri"],
            name=resource["name"],
            description=resource["description"],
            mime_type=resource["mime_type"],
        )(bind_resource(resource, store))

    logger.info("Registered %d resources", len(all_resources))

    changed = store.sweep_overdue()
    if changed:
        logger.info("Startup sweep marked %d record(s) overdue", len(changed))

    return mcp


# =============================================================================
# TRANSPORT CONFIGURATION
# =============================================================================


def run_server(mcp: FastMCP, config: AppConfig) -> None:
    """Run on the configured transport until interrupted."""

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        if config.transport == "stdio":
            logger.info("MCP Server ready on stdio")
            mcp.run(transport="stdio")
        else:
            logger.info("MCP Server ready on http://%s:%d", config.http_host, config.http_port)
            mcp.run(transport="streamable-http", host=config.http_host, port=config.http_port)
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main() -> None:
    """Entry point for ``lending-desk-mcp``."""
    config = get_config()
    configure_logging(config)

    try:
        logger.info("=" * 60)
        logger.info("Lending Desk MCP Server")
        logger.info("Version: %s", config.server_version)
        logger.info("Transport: %s", config.transport)
        logger.info("Debug Mode: %s", config.debug)
        logger.info("=" * 60)

        run_server(create_server(config), config)

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
