from .mcp_server import create_mcp_server, get_mcp_client

__all__ = ['create_mcp_server', 'get_mcp_client']
