"""
CiviCRM MCP - CiviCRM for AI agents.

Exposes CiviCRM contacts, activities, contributions, events, memberships,
groups, tags, relationships and custom fields as MCP tools.
"""

__version__ = "1.2.0"


def serve() -> None:
    """Run the CiviCRM MCP server.

    This is called when you run: python -m civicrm_mcp.server
    Or when an MCP host starts the civicrm-mcp command.
    """
    from civicrm_mcp.server import serve as _serve
    _serve()


__all__ = ["serve", "__version__"]
