"""pkgdocs - package documentation and source gateway for AI coding assistants.

Usage:
    from pkgdocs.build import build_deps
    from pkgdocs.server import build_server
    from pkgdocs.settings import general_settings, pkgdocs_settings

    mcp = build_server(build_deps(pkgdocs_settings, general_settings))
    mcp.run()  # stdio transport

Or from the command line:
    python -m pkgdocs --mode local --root ../react-base-core
"""
