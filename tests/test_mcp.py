"""
Tests for the MCP server: registration, tool handlers and JSON-RPC.
"""

import io
import json
from unittest.mock import MagicMock

import pytest

from repomirror.api import RepoMirror
from repomirror.config import get_default_config
from repomirror.infra.matcher import LineMatcher
from repomirror.mcp.server import (
    MCPServer, create_mcp_server, _handle_jsonrpc_request, _run_stdio_server,
)

from conftest import FakeGit

TOOL_NAMES = {
    "noir_sync_repos", "noir_status", "noir_search_code", "noir_search_docs",
    "noir_search_stdlib", "noir_list_examples", "noir_read_example",
    "noir_read_file", "noir_list_libraries",
}


@pytest.fixture
def mirror(tmp_path):
    mirror = RepoMirror(root=tmp_path / "repos", config=get_default_config())
    fake = FakeGit()
    mirror.store.git = fake
    mirror.sync_service.strategy.git = fake
    no_rg = MagicMock(spec=LineMatcher)
    no_rg.available.return_value = False
    mirror.search_service.primary = no_rg
    return mirror


@pytest.fixture
def populated(mirror):
    root = mirror.root
    for name in ("noir", "noir-examples"):
        (root / name / ".git").mkdir(parents=True)
    files = {
        "noir/noir_stdlib/src/hash/mod.nr": "pub fn poseidon2() {}\n",
        "noir/docs/docs/intro.md": "Write fn main first\n",
        "noir-examples/hello_world/src/main.nr": "fn main(x: Field) { assert(x != 0); }\n",
    }
    for path, text in files.items():
        (root / path).parent.mkdir(parents=True, exist_ok=True)
        (root / path).write_text(text)
    return mirror


@pytest.fixture
def server(mirror):
    return create_mcp_server(mirror)


class TestMCPServer:
    def test_registers_all_tools(self, server):
        assert set(server.tools) == TOOL_NAMES
        for tool in server.list_tools():
            assert tool['inputSchema']['type'] == 'object'

    def test_resources(self, server):
        uris = {r['uri'] for r in server.list_resources()}
        assert uris == {"mirror://status", "mirror://repo/{name}"}

    def test_unknown_tool(self, server):
        with pytest.raises(ValueError, match="Unknown tool"):
            server.call_tool("nope", {})

    def test_read_repo_resource(self, server):
        repo = server.read_resource("mirror://repo/poseidon")
        assert repo['name'] == "poseidon"
        assert repo['cloned'] is False

    def test_read_unknown_repo_resource(self, server):
        assert 'error' in server.read_resource("mirror://repo/unknown")

    def test_unknown_resource(self, server):
        with pytest.raises(ValueError):
            server.read_resource("other://thing")

    def test_extract_uri_params(self):
        server = MCPServer()
        assert server._extract_uri_params("mirror://repo/{name}", "mirror://repo/bb.js") == {"name": "bb.js"}
        assert server._extract_uri_params("mirror://repo/{name}", "mirror://status") == {}


class TestTools:
    def test_search_before_sync(self, server):
        result = server.call_tool("noir_search_code", {"query": "fn main"})
        assert result['success'] is False
        assert "noir_sync_repos" in result['message']

    def test_search_uncloned_repo(self, server, populated):
        result = server.call_tool("noir_search_code", {"query": "fn", "repo": "poseidon"})
        assert result['success'] is False
        assert "poseidon" in result['message']

    def test_search_code(self, server, populated):
        result = server.call_tool("noir_search_code", {"query": "assert", "max_results": 5})

        assert result['success'] is True
        assert result['results'] == [{
            'file': 'noir-examples/hello_world/src/main.nr',
            'content': 'fn main(x: Field) { assert(x != 0); }',
            'repo': 'noir-examples',
            'line': 1,
        }]

    def test_search_docs_requires_noir(self, server):
        result = server.call_tool("noir_search_docs", {"query": "main"})
        assert result['success'] is False

    def test_search_docs(self, server, populated):
        result = server.call_tool("noir_search_docs", {"query": "fn main"})
        assert [r['file'] for r in result['results']] == ["noir/docs/docs/intro.md"]

    def test_search_stdlib(self, server, populated):
        result = server.call_tool("noir_search_stdlib", {"query": "poseidon"})
        assert result['results'][0]['file'] == "noir/noir_stdlib/src/hash/mod.nr"

    def test_list_and_read_example(self, server, populated):
        listed = server.call_tool("noir_list_examples", {})
        assert [e['name'] for e in listed['examples']] == ["hello_world"]

        read = server.call_tool("noir_read_example", {"name": "hello"})
        assert read['success'] is True
        assert "assert(x != 0)" in read['content']

    def test_read_missing_example(self, server, populated):
        assert server.call_tool("noir_read_example", {"name": "zzz"})['success'] is False

    def test_read_file(self, server, populated):
        result = server.call_tool("noir_read_file", {"path": "noir/noir_stdlib/src/hash/mod.nr"})
        assert result['success'] is True
        assert result['type'] == "circuit"

    def test_read_file_outside_mirror(self, server, populated):
        assert server.call_tool("noir_read_file", {"path": "../../etc/passwd"})['success'] is False

    def test_list_libraries(self, server):
        result = server.call_tool("noir_list_libraries", {"category": "reference"})
        assert [lib['name'] for lib in result['libraries']] == ["awesome-noir"]

    def test_sync_and_status(self, server):
        result = server.call_tool("noir_sync_repos", {"repos": ["poseidon"]})

        assert result['success'] is True
        assert result['repos'][0]['status'] == "Cloned poseidon @ master (branch)"

        status = server.call_tool("noir_status", {})
        by_name = {r['name']: r for r in status['repos']}
        assert by_name['poseidon']['cloned'] is True

    def test_sync_unknown_category(self, server):
        result = server.call_tool("noir_sync_repos", {"categories": ["plugins"]})
        assert result['success'] is False
        assert "plugins" in result['message']


class TestJsonRpc:
    def test_initialize(self, server):
        response = _handle_jsonrpc_request(server, {"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        assert response['result']['serverInfo']['name'] == "repomirror"

    def test_tools_call_marks_failures(self, server):
        response = _handle_jsonrpc_request(server, {
            "jsonrpc": "2.0", "id": 2, "method": "tools/call",
            "params": {"name": "noir_search_code", "arguments": {"query": "x"}},
        })
        assert response['result']['isError'] is True
        payload = json.loads(response['result']['content'][0]['text'])
        assert payload['success'] is False

    def test_bad_arguments(self, server):
        response = _handle_jsonrpc_request(server, {
            "jsonrpc": "2.0", "id": 3, "method": "tools/call",
            "params": {"name": "noir_search_code", "arguments": {"bogus": 1}},
        })
        assert response['error']['code'] == -32602

    def test_unknown_method(self, server):
        response = _handle_jsonrpc_request(server, {"jsonrpc": "2.0", "id": 4, "method": "nope"})
        assert response['error']['code'] == -32601

    def test_stdio_loop(self, server):
        stdin = io.StringIO(
            '{"jsonrpc": "2.0", "id": 1, "method": "tools/list"}\n'
            'not json\n'
            '{"jsonrpc": "2.0", "method": "notifications/initialized"}\n'
        )
        stdout = io.StringIO()

        _run_stdio_server(server, stdin=stdin, stdout=stdout)

        lines = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert len(lines) == 2
        assert len(lines[0]['result']['tools']) == len(TOOL_NAMES)
        assert lines[1]['error']['code'] == -32700
