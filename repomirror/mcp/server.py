"""
MCP Server implementation for repomirror.

Implements the Model Context Protocol (MCP) to expose the Noir mirror
to LLM tools: syncing repositories, searching code, docs and the standard
library, and reading example circuits.

Architecture:
    MCPServer dispatches to tool and resource handlers built on top of
    RepoMirror (which wraps SyncService and SearchService).
"""

import json
import logging
import re
import sys
from http.server import HTTPServer, BaseHTTPRequestHandler
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Callable

from .. import __version__
from ..api import RepoMirror
from ..catalog import NOIR_REPO, get_pin
from ..domain.pin import Category
from ..services.search_service import file_type

logger = logging.getLogger(__name__)

NOT_SYNCED_HINT = "Run noir_sync_repos first."


@dataclass
class Resource:
    """Represents an MCP resource (read-only data)."""
    uri: str
    name: str
    description: str
    mime_type: str = "application/json"


@dataclass
class Tool:
    """Represents an MCP tool (action)."""
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable


@dataclass
class MCPServer:
    """
    repomirror MCP Server.

    Exposes repomirror functionality as MCP resources and tools.
    """
    resources: Dict[str, Resource] = field(default_factory=dict)
    tools: Dict[str, Tool] = field(default_factory=dict)
    resource_handlers: Dict[str, Callable] = field(default_factory=dict)

    def register_resource(self, uri_pattern: str, name: str, description: str,
                          handler: Callable, mime_type: str = "application/json"):
        """Register a resource with its handler."""
        self.resources[uri_pattern] = Resource(
            uri=uri_pattern,
            name=name,
            description=description,
            mime_type=mime_type
        )
        self.resource_handlers[uri_pattern] = handler
        logger.debug(f"Registered resource: {uri_pattern}")

    def register_tool(self, name: str, description: str,
                      input_schema: Dict[str, Any], handler: Callable):
        """Register a tool with its handler."""
        self.tools[name] = Tool(
            name=name,
            description=description,
            input_schema=input_schema,
            handler=handler
        )
        logger.debug(f"Registered tool: {name}")

    def list_resources(self) -> List[Dict[str, Any]]:
        """List all available resources."""
        return [
            {
                "uri": r.uri,
                "name": r.name,
                "description": r.description,
                "mimeType": r.mime_type
            }
            for r in self.resources.values()
        ]

    def list_tools(self) -> List[Dict[str, Any]]:
        """List all available tools."""
        return [
            {
                "name": t.name,
                "description": t.description,
                "inputSchema": t.input_schema
            }
            for t in self.tools.values()
        ]

    def read_resource(self, uri: str) -> Dict[str, Any]:
        """Read a resource by URI."""
        if uri in self.resource_handlers:
            return self.resource_handlers[uri]()

        for pattern, handler in self.resource_handlers.items():
            params = self._extract_uri_params(pattern, uri)
            if params:
                return handler(**params)

        raise ValueError(f"Unknown resource: {uri}")

    def call_tool(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Call a tool by name with arguments."""
        if name not in self.tools:
            raise ValueError(f"Unknown tool: {name}")

        return self.tools[name].handler(**arguments)

    def _extract_uri_params(self, pattern: str, uri: str) -> Dict[str, str]:
        """Extract {param} values from a URI; empty if it does not match."""
        param_names = re.findall(r'\{(\w+)\}', pattern)
        if not param_names:
            return {}

        regex_pattern = re.sub(r'\{(\w+)\}', r'([^/]+)', re.escape(pattern).replace(r'\{', '{').replace(r'\}', '}'))
        match = re.match(f"^{regex_pattern}$", uri)
        if not match:
            return {}

        return dict(zip(param_names, match.groups()))


def _search_response(results, kind: str) -> Dict[str, Any]:
    label = f"{kind} matches" if kind else "matches"
    return {
        'success': True,
        'results': [r.to_dict() for r in results],
        'message': f"Found {len(results)} {label}" if results else f"No {label} found",
    }


def _failure(message: str, **extra) -> Dict[str, Any]:
    response = {'success': False, 'message': message}
    response.update(extra)
    return response


def create_mcp_server(mirror: Optional[RepoMirror] = None) -> MCPServer:
    """
    Create and configure the repomirror MCP server.

    Args:
        mirror: RepoMirror to serve (default: one built from config)

    Returns:
        Configured MCPServer instance
    """
    server = MCPServer()
    mirror = mirror or RepoMirror()

    # === RESOURCE HANDLERS ===

    def get_status():
        return mirror.status()

    def get_repo(name: str):
        pin = get_pin(name)
        if not pin:
            return {'error': f'Repository not found: {name}'}

        result = pin.to_dict()
        result['cloned'] = mirror.store.exists(name)
        result['commit'] = mirror.store.commit(name)
        result['current_tag'] = mirror.store.tag(name)
        result['sparse_paths'] = list(mirror.store.sparse_paths(name))
        return result

    server.register_resource(
        "mirror://status",
        "Mirror status",
        "Clone state and commit of every configured repository",
        get_status
    )

    server.register_resource(
        "mirror://repo/{name}",
        "Repository",
        "Pin and on-disk state of one repository",
        get_repo
    )

    # === TOOL HANDLERS ===

    def tool_sync(version: Optional[str] = None, force: bool = False,
                  repos: Optional[List[str]] = None,
                  categories: Optional[List[str]] = None) -> Dict[str, Any]:
        try:
            summary = mirror.sync(version=version, force=force,
                                  repos=repos or (), categories=categories or ())
        except ValueError as e:
            return _failure(str(e), repos=[])
        return summary.to_dict()

    def tool_status() -> Dict[str, Any]:
        return mirror.status()

    def tool_search_code(query: str, file_pattern: str = "*.nr", repo: Optional[str] = None,
                         max_results: int = 30, case_sensitive: bool = False) -> Dict[str, Any]:
        if repo and not mirror.is_cloned(repo.split('/')[0]):
            return _failure(f"Repository '{repo}' is not cloned. {NOT_SYNCED_HINT}", results=[])
        if not mirror.any_cloned():
            return _failure(f"No repositories are cloned. {NOT_SYNCED_HINT}", results=[])

        results = mirror.search(query, file_pattern=file_pattern, repo=repo,
                                max_results=max_results, case_sensitive=case_sensitive)
        return _search_response(results, "")

    def tool_search_docs(query: str, section: Optional[str] = None,
                         max_results: int = 20) -> Dict[str, Any]:
        if not mirror.is_cloned(NOIR_REPO):
            return _failure(f"{NOIR_REPO} repo is not cloned. {NOT_SYNCED_HINT}", results=[])
        return _search_response(mirror.search_docs(query, section=section, max_results=max_results),
                                "documentation")

    def tool_search_stdlib(query: str, max_results: int = 30) -> Dict[str, Any]:
        if not mirror.is_cloned(NOIR_REPO):
            return _failure(f"{NOIR_REPO} repo is not cloned. {NOT_SYNCED_HINT}", results=[])
        return _search_response(mirror.search_stdlib(query, max_results=max_results), "stdlib")

    def tool_list_examples(category: Optional[str] = None) -> Dict[str, Any]:
        if not mirror.any_cloned():
            return _failure(f"No repositories are cloned. {NOT_SYNCED_HINT}", examples=[])

        examples = mirror.examples(category)
        if examples:
            message = f"Found {len(examples)} example circuits"
        elif category:
            message = f"No examples found matching category '{category}'"
        else:
            message = "No examples found"
        return {'success': True, 'examples': [e.to_dict() for e in examples], 'message': message}

    def tool_read_example(name: str) -> Dict[str, Any]:
        example = mirror.find_example(name)
        if not example:
            return _failure(f"Example '{name}' not found. Use noir_list_examples to see available examples.")

        content = mirror.read_file(example.path)
        if content is None:
            return _failure(f"Could not read example file: {example.path}", example=example.to_dict())

        return {
            'success': True,
            'example': example.to_dict(),
            'content': content,
            'message': f"Read {example.name} from {example.repo}",
        }

    def tool_read_file(path: str) -> Dict[str, Any]:
        content = mirror.read_file(path)
        if content is None:
            return _failure(f"File not found: {path}. Make sure the path is relative to the repos directory.")
        return {
            'success': True,
            'content': content,
            'type': file_type(path),
            'message': f"Read file: {path}",
        }

    def tool_list_libraries(category: Optional[str] = None) -> Dict[str, Any]:
        # Only library-ish categories are listed; anything else means "both"
        selected = None
        if category in (Category.LIBRARIES.value, Category.REFERENCE.value):
            selected = Category(category)

        libraries = mirror.libraries(selected)
        return {
            'success': True,
            'libraries': [lib.to_dict() for lib in libraries],
            'message': f"Found {len(libraries)} library/reference repos",
        }

    # === REGISTER TOOLS ===

    server.register_tool(
        "noir_sync_repos",
        "Clone or update Noir repositories locally. Run this first to enable searching. "
        "Default: syncs core repos (noir compiler/stdlib/docs, noir-examples). "
        "Use categories to sync additional repos: 'libraries' for community packages, "
        "'reference' for awesome-noir.",
        {
            "type": "object",
            "properties": {
                "version": {"type": "string", "description": "Noir version tag for the main noir repo (e.g., 'v1.0.0-beta.3')"},
                "force": {"type": "boolean", "description": "Force re-clone even if repos exist (default: false)"},
                "repos": {"type": "array", "items": {"type": "string"}, "description": "Specific repos to sync by name"},
                "categories": {"type": "array", "items": {"type": "string"}, "description": "Categories to sync: 'core' (default), 'libraries', 'reference'"}
            },
            "required": []
        },
        tool_sync
    )

    server.register_tool(
        "noir_status",
        "Check which Noir repositories are cloned, their categories and commit hashes",
        {"type": "object", "properties": {}, "required": []},
        tool_status
    )

    server.register_tool(
        "noir_search_code",
        "Search Noir source code across all cloned repos. Supports regex patterns.",
        {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (supports regex)"},
                "file_pattern": {"type": "string", "description": "File glob pattern (default: *.nr). Examples: *.ts, *.{nr,rs}"},
                "repo": {"type": "string", "description": "Specific repo to search (e.g., 'noir', 'noir-bignum')"},
                "max_results": {"type": "integer", "description": "Maximum results to return (default: 30)"},
                "case_sensitive": {"type": "boolean", "description": "Match case exactly (default: false)"}
            },
            "required": ["query"]
        },
        tool_search_code
    )

    server.register_tool(
        "noir_search_docs",
        "Search Noir documentation (markdown files in the noir repo)",
        {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query"},
                "section": {"type": "string", "description": "Docs section to search within (e.g., 'noir', 'tooling')"},
                "max_results": {"type": "integer", "description": "Maximum results to return (default: 20)"}
            },
            "required": ["query"]
        },
        tool_search_docs
    )

    server.register_tool(
        "noir_search_stdlib",
        "Search the Noir standard library (noir_stdlib)",
        {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search query (supports regex)"},
                "max_results": {"type": "integer", "description": "Maximum results to return (default: 30)"}
            },
            "required": ["query"]
        },
        tool_search_stdlib
    )

    server.register_tool(
        "noir_list_examples",
        "List available Noir example circuits",
        {
            "type": "object",
            "properties": {
                "category": {"type": "string", "description": "Filter examples by name or path substring"}
            },
            "required": []
        },
        tool_list_examples
    )

    server.register_tool(
        "noir_read_example",
        "Read the main.nr source of an example circuit",
        {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Example name (from noir_list_examples)"}
            },
            "required": ["name"]
        },
        tool_read_example
    )

    server.register_tool(
        "noir_read_file",
        "Read any file from the cloned repositories",
        {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path relative to the repos directory (e.g., 'noir/noir_stdlib/src/hash/mod.nr')"}
            },
            "required": ["path"]
        },
        tool_read_file
    )

    server.register_tool(
        "noir_list_libraries",
        "List Noir library and reference repositories with their clone status",
        {
            "type": "object",
            "properties": {
                "category": {"type": "string", "description": "'libraries' or 'reference' (default: both)"}
            },
            "required": []
        },
        tool_list_libraries
    )

    return server


def run_mcp_server(transport: str = "stdio", port: int = 8765,
                   mirror: Optional[RepoMirror] = None):
    """
    Run the MCP server.

    Args:
        transport: Transport type ("stdio" or "http")
        port: Port for the HTTP transport
        mirror: RepoMirror to serve (default: one built from config)
    """
    server = create_mcp_server(mirror)

    if transport == "stdio":
        _run_stdio_server(server)
    elif transport == "http":
        _run_http_server(server, port=port)
    else:
        raise ValueError(f"Unknown transport: {transport}")


def _run_stdio_server(server: MCPServer, stdin=None, stdout=None):
    """Run MCP server over stdio (JSON-RPC, one message per line)."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    logger.info("Starting repomirror MCP server (stdio)")

    for line in stdin:
        if not line.strip():
            continue
        try:
            request = json.loads(line)
        except json.JSONDecodeError:
            error_response = {
                "jsonrpc": "2.0",
                "error": {"code": -32700, "message": "Parse error"},
                "id": None
            }
            print(json.dumps(error_response), file=stdout, flush=True)
            continue

        response = _handle_jsonrpc_request(server, request)
        # Notifications get no response
        if request.get("id") is not None:
            print(json.dumps(response), file=stdout, flush=True)


def _handle_jsonrpc_request(server: MCPServer, request: Dict[str, Any]) -> Dict[str, Any]:
    """Handle a JSON-RPC request."""
    method = request.get("method")
    params = request.get("params") or {}
    request_id = request.get("id")

    result = None
    error = None

    try:
        if method == "initialize":
            result = {
                "protocolVersion": "2024-11-05",
                "capabilities": {
                    "resources": {},
                    "tools": {}
                },
                "serverInfo": {
                    "name": "repomirror",
                    "version": __version__
                }
            }

        elif method == "resources/list":
            result = {"resources": server.list_resources()}

        elif method == "resources/read":
            uri = params.get("uri")
            content = server.read_resource(uri)
            result = {
                "contents": [{
                    "uri": uri,
                    "mimeType": "application/json",
                    "text": json.dumps(content, indent=2)
                }]
            }

        elif method == "tools/list":
            result = {"tools": server.list_tools()}

        elif method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments") or {}
            tool_result = server.call_tool(tool_name, arguments)
            result = {
                "content": [{
                    "type": "text",
                    "text": json.dumps(tool_result, indent=2)
                }],
                "isError": tool_result.get("success") is False,
            }

        elif method == "ping":
            result = {}

        else:
            error = {"code": -32601, "message": f"Method not found: {method}"}

    except (ValueError, TypeError) as e:
        error = {"code": -32602, "message": str(e)}
    except Exception as e:
        logger.exception(f"Error handling {method}")
        error = {"code": -32603, "message": str(e)}

    response = {"jsonrpc": "2.0", "id": request_id}
    if error:
        response["error"] = error
    else:
        response["result"] = result

    return response


def _run_http_server(server: MCPServer, host: str = "localhost", port: int = 8765):
    """Run MCP server over HTTP (for testing/debugging)."""

    class MCPHandler(BaseHTTPRequestHandler):
        def do_POST(self):
            content_length = int(self.headers.get('Content-Length', 0))
            body = self.rfile.read(content_length)

            try:
                request = json.loads(body)
                response = _handle_jsonrpc_request(server, request)
                status = 200
            except json.JSONDecodeError:
                response = {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}, "id": None}
                status = 400

            self.send_response(status)
            self.send_header('Content-Type', 'application/json')
            self.end_headers()
            self.wfile.write(json.dumps(response).encode())

        def log_message(self, format, *args):
            logger.debug(format % args)

    httpd = HTTPServer((host, port), MCPHandler)
    logger.info(f"Starting repomirror MCP server (HTTP) on {host}:{port}")
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
