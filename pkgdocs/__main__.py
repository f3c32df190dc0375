"""Run the pkgdocs MCP server.

Usage:
    python -m pkgdocs              # stdio (default)
    python -m pkgdocs -t http      # HTTP on port 8000
    python -m pkgdocs -t sse -p 9000
"""

from pkgdocs.cli import main

if __name__ == "__main__":
    main()
