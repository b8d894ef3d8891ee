"""
Native MCP surface for the image tools.

Registers generate_image and modify_image on a FastMCP server so MCP clients
can call them directly instead of going through POST /mcp. Both tools return
the same result dictionaries as the HTTP endpoint.
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastmcp import FastMCP, Client
from pydantic import Field

from common.enums import ToolName
from handlers.image_tools import ImageTools

def create_mcp_server(tools: ImageTools, owns_client: bool = False) -> FastMCP:
    @asynccontextmanager
    async def lifespan(server: FastMCP):
        try:
            yield {}
        finally:
            # Standalone (stdio) servers release the upstream client themselves
            if owns_client:
                await tools.client.aclose()

    mcp_server = FastMCP("ImageRelayToolServer", lifespan=lifespan)

    @mcp_server.tool(name=ToolName.GENERATE_IMAGE.value)
    async def generate_image(
        prompt: Annotated[str, Field(description="Description of image contents")]
    ) -> dict:
        """Generate an image from a text prompt. Returns the local file path of
        the saved image, or an error message.
        """
        result = await tools.generate_image({'prompt': prompt})
        return result.to_response()

    @mcp_server.tool(name=ToolName.MODIFY_IMAGE.value)
    async def modify_image(
        prompt: Annotated[str, Field(description="How the image should change")],
        image_filename: Annotated[str, Field(description="Name of a file in the input images folder")]
    ) -> dict:
        """Modify an existing input image using a text prompt. Returns the local
        file path of the modified image, or an error message.
        """
        result = await tools.modify_image({'prompt': prompt, 'image_filename': image_filename})
        return result.to_response()

    return mcp_server

@asynccontextmanager
async def get_mcp_client(mcp_server: FastMCP):
    """
    Get MCP client for in-memory testing and internal tool calls.

    Usage:
        async with get_mcp_client(server) as client:
            result = await client.call_tool("generate_image", {"prompt": "a red fox"})
    """
    async with Client(mcp_server) as client:
        yield client
