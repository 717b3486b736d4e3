"""Example MCP tool server — IP address geolocation over streamable HTTP.

Run: python services/ip_location_service.py
Then point a config.json entry at it:
  {"mcpServers": {"ip": {"type": "http", "command": "http://localhost:8081/mcp"}}}
"""
import ipaddress
import logging
import os

import httpx
from mcp.server.fastmcp import FastMCP

logger = logging.getLogger(__name__)

IP_API_URL = os.getenv("IP_API_URL", "http://ip-api.com/json/")
HOST = os.getenv("IP_LOCATION_HOST", "0.0.0.0")
PORT = int(os.getenv("IP_LOCATION_PORT", "8081"))

mcp = FastMCP("ip-location-server", host=HOST, port=PORT)


@mcp.tool(
    name="ip_location_query",
    description="Look up the geographic location of an IP address",
)
async def ip_location_query(ip: str) -> str:
    """Return the raw JSON location record for `ip`.

    Args:
        ip: IPv4 or IPv6 address to look up
    """
    try:
        ipaddress.ip_address(ip.strip())
    except ValueError:
        raise ValueError(f"invalid IP address: {ip}")

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.get(IP_API_URL + ip.strip())
            resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"IP lookup error: {e}")
        raise RuntimeError(f"lookup failed: {e}") from e

    return resp.text


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.info(f"IP location tool server on http://{HOST}:{PORT}/mcp")
    mcp.run(transport="streamable-http")
