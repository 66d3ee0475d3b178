"""
ln-address MCP Server

Main server module exposing Lightning Address invoice creation and BOLT11
inspection to AI agents via MCP.
"""

import asyncio
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    Tool,
    TextContent,
)

from .config import ServerConfiguration, get_configuration
from .lnurl_client import LnurlPayClient
from .tools.create_invoice import create_invoice
from .tools.decode_invoice import decode_invoice
from .tools.resolve_address import resolve_lightning_address

# Configure logging (stderr keeps the stdio MCP channel clean)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("ln-address-mcp")


class LnAddressServer:
    """MCP Server for Lightning Address invoices."""

    def __init__(
        self,
        configuration: ServerConfiguration | None = None,
        lnurl_client: LnurlPayClient | None = None,
    ) -> None:
        self.configuration = configuration or get_configuration()
        self.server = Server("ln-address")
        self.lnurl_client = lnurl_client or LnurlPayClient(self.configuration.http)

        logging.getLogger().setLevel(self.configuration.log_level)
        self._setup_handlers()

    def list_tool_definitions(self) -> list[Tool]:
        """Return the list of available tools."""
        return [
            Tool(
                name="create_invoice",
                description=(
                    "Creates a Lightning Network invoice (payment request) from a "
                    "Lightning Address. Returns a BOLT11 invoice string that can be "
                    "used to pay the recipient over the Lightning Network."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "address": {
                            "type": "string",
                            "description": (
                                "Lightning Address in email format "
                                "(e.g., 'alice@wallet.com', 'bob@zaphq.io')"
                            ),
                        },
                        "amount_sats": {
                            "type": "integer",
                            "description": (
                                "Payment amount in satoshis (1 BTC = 100,000,000 satoshis). "
                                "Must be within the recipient's min/max limits."
                            ),
                            "minimum": 1,
                        },
                        "comment": {
                            "type": "string",
                            "description": (
                                "Optional comment for the recipient. Sent only if the "
                                "recipient accepts comments; truncated to their limit."
                            ),
                        },
                    },
                    "required": ["address", "amount_sats"],
                },
            ),
            Tool(
                name="decode_invoice",
                description=(
                    "Inspect a BOLT11 invoice: detects the network (mainnet, testnet, "
                    "regtest) and the amount in satoshis from the invoice prefix. "
                    "Does not decode payment hash, payee, description or expiry."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "invoice": {
                            "type": "string",
                            "description": "BOLT11 Lightning invoice string",
                        },
                    },
                    "required": ["invoice"],
                },
            ),
            Tool(
                name="resolve_lightning_address",
                description=(
                    "Look up a Lightning Address and return the amounts it accepts "
                    "(in satoshis), its description and allowed comment length, "
                    "without creating an invoice."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "address": {
                            "type": "string",
                            "description": "Lightning Address in email format",
                        },
                    },
                    "required": ["address"],
                },
            ),
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> str:
        """Route a tool invocation to its handler."""
        if name == "create_invoice":
            return await create_invoice(
                address=arguments.get("address", ""),
                amount_sats=arguments.get("amount_sats", 0),
                comment=arguments.get("comment"),
                client=self.lnurl_client,
            )

        elif name == "decode_invoice":
            return await decode_invoice(invoice=arguments.get("invoice", ""))

        elif name == "resolve_lightning_address":
            return await resolve_lightning_address(
                address=arguments.get("address", ""),
                client=self.lnurl_client,
            )

        return f"Unknown tool: {name}"

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tool_definitions()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Handle tool invocations."""
            try:
                result = await self.dispatch(name, arguments or {})
                return [TextContent(type="text", text=str(result))]

            except Exception as e:
                logger.exception(f"Error in tool {name}")
                return [TextContent(type="text", text=f"Error: {e!s}")]

    async def run(self) -> None:
        """Run the MCP server."""
        logger.info("Starting ln-address MCP server...")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def main() -> None:
    """Entry point for the MCP server."""
    server = LnAddressServer()

    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
