import pytest
from fastmcp import Client

@pytest.mark.asyncio
async def test_server_name_and_ping():
    from gsn.server import mcp

    assert getattr(mcp, "name", "") == "gsn"

    async with Client(mcp) as client:
        result = await client.call_tool("ping", {})
        assert result.data == "pong"
        assert result.content and getattr(result.content[0], "text", None) == "pong"
