"""
MCP (Model Context Protocol) server for repomirror.

Exposes the Noir mirror to LLM tools.

Resources (read-only data):
    mirror://status             - Clone state of every configured repository
    mirror://repo/{name}        - Pin and on-disk state of one repository

Tools (actions):
    noir_sync_repos(version?, force?, repos?, categories?)
    noir_status()
    noir_search_code(query, file_pattern?, repo?, max_results?, case_sensitive?)
    noir_search_docs(query, section?, max_results?)
    noir_search_stdlib(query, max_results?)
    noir_list_examples(category?)
    noir_read_example(name)
    noir_read_file(path)
    noir_list_libraries(category?)
"""

from .server import create_mcp_server, run_mcp_server

__all__ = ['create_mcp_server', 'run_mcp_server']
