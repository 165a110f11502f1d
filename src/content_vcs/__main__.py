"""Entry point for the content-vcs MCP server."""

from content_vcs.server import create_server


def main() -> None:
    """Run the content-vcs MCP server."""
    server = create_server()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
