"""
Tests for the search service: scoping, fallback, examples and file reads.
"""

from unittest.mock import MagicMock

import pytest

from repomirror.domain import Category
from repomirror.infra.matcher import LineMatcher, MatcherUnavailable, ScanMatcher
from repomirror.normalizer import RawMatch
from repomirror.services import SearchService, file_type

from conftest import make_clone


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


@pytest.fixture
def mirror(store):
    root = store.ensure_root()
    make_clone(store, "noir")
    make_clone(store, "noir-examples")
    write(root / "noir" / "docs" / "docs" / "intro.md", "Noir uses fn main as entry point\n")
    write(root / "noir" / "docs" / "tooling" / "lsp.mdx", "The fn main of tooling\n")
    write(root / "noir" / "noir_stdlib" / "src" / "hash" / "mod.nr", "pub fn poseidon2() {}\n")
    write(root / "noir" / "examples" / "codegen" / "src" / "main.nr", "fn main() {}\n")
    write(root / "noir-examples" / "hello_world" / "src" / "main.nr", "fn main(x: Field) {}\n")
    write(root / "noir-examples" / "recursion" / "circuits" / "inner" / "src" / "main.nr", "fn main() {}\n")
    write(root / "noir-examples" / "notes" / "main.nr", "fn main() {}\n")
    return store


@pytest.fixture
def no_rg():
    matcher = MagicMock(spec=LineMatcher)
    matcher.available.return_value = False
    return matcher


@pytest.fixture
def service(mirror, no_rg):
    return SearchService(mirror, primary=no_rg, fallback=ScanMatcher())


class TestSearchCode:
    def test_missing_root_is_empty(self, tmp_path, no_rg):
        from repomirror.services import MirrorStore
        service = SearchService(MirrorStore(tmp_path / "absent"), primary=no_rg)
        assert service.search_code("fn") == []

    def test_missing_repo_scope_is_empty(self, service):
        assert service.search_code("fn", repo="noir-bignum") == []

    def test_results_are_mirror_relative(self, service):
        results = service.search_code("fn main", max_results=10)

        files = [r.file for r in results]
        assert "noir-examples/hello_world/src/main.nr" in files
        assert all(not f.startswith("/") for f in files)
        for result in results:
            assert result.repo == result.file.split("/")[0]

    def test_max_results(self, service):
        assert len(service.search_code("fn", max_results=2)) == 2
        assert service.search_code("fn", max_results=0) == []

    def test_default_max_results(self, mirror, no_rg):
        service = SearchService(mirror, primary=no_rg, default_max_results=1)
        assert len(service.search_code("fn")) == 1

    def test_repo_scope(self, service):
        results = service.search_code("fn", repo="noir-examples")
        assert results
        assert all(r.repo == "noir-examples" for r in results)

    def test_falls_back_when_primary_fails(self, mirror):
        primary = MagicMock(spec=LineMatcher)
        primary.name = "ripgrep"
        primary.available.return_value = True
        primary.match.side_effect = MatcherUnavailable("rg exited 2")
        service = SearchService(mirror, primary=primary, fallback=ScanMatcher())

        results = service.search_code("poseidon2")

        assert [r.file for r in results] == ["noir/noir_stdlib/src/hash/mod.nr"]
        primary.match.assert_called_once()

    def test_primary_results_are_normalized(self, mirror):
        root = mirror.root
        primary = MagicMock(spec=LineMatcher)
        primary.available.return_value = True
        primary.match.return_value = [
            RawMatch(path=str(root / "noir" / "a.nr"), line=i, content=f" line {i} ")
            for i in range(1, 6)
        ]
        service = SearchService(mirror, primary=primary)

        results = service.search_code("line", max_results=3)

        assert [r.line for r in results] == [1, 2, 3]
        assert results[0].file == "noir/a.nr"
        assert results[0].content == "line 1"

    def test_unterminated_regex(self, service):
        assert service.search_code("[unterminated") == []

    def test_relative_mirror_root(self, tmp_path, monkeypatch, fake_git, no_rg):
        from repomirror.services import MirrorStore
        monkeypatch.chdir(tmp_path)
        store = MirrorStore("repos", git_client=fake_git)
        write(tmp_path / "repos" / "noir" / "src" / "a.nr", "fn main() {}\n")

        results = SearchService(store, primary=no_rg).search_code("fn main")

        assert store.root == tmp_path / "repos"
        assert [(r.file, r.repo, r.line) for r in results] == [("noir/src/a.nr", "noir", 1)]

    def test_scope_outside_mirror_is_refused(self, service, tmp_path):
        write(tmp_path / "outside" / "leak.nr", "fn main() {}\n")

        assert service.search_code("fn main", repo=str(tmp_path / "outside")) == []
        assert service.search_code("fn main", repo="../outside") == []


class TestDocsAndStdlib:
    def test_docs_only_searches_markdown(self, service):
        results = service.search_docs("fn main")
        assert {r.file for r in results} == {
            "noir/docs/docs/intro.md",
            "noir/docs/tooling/lsp.mdx",
        }

    def test_docs_section(self, service):
        results = service.search_docs("fn main", section="tooling")
        assert [r.file for r in results] == ["noir/docs/tooling/lsp.mdx"]

    def test_unknown_section_searches_all_docs(self, service):
        assert len(service.search_docs("fn main", section="nope")) == 2

    def test_stdlib(self, service):
        results = service.search_stdlib("poseidon2")
        assert [r.file for r in results] == ["noir/noir_stdlib/src/hash/mod.nr"]

    def test_stdlib_missing(self, store, no_rg):
        make_clone(store, "noir")
        service = SearchService(store, primary=no_rg)
        assert service.search_stdlib("fn") == []


class TestExamples:
    def test_list_examples(self, service):
        examples = service.list_examples()
        by_name = {e.name: e for e in examples}

        assert set(by_name) == {"hello_world", "inner", "codegen"}
        assert by_name["hello_world"].path == "noir-examples/hello_world/src/main.nr"
        assert by_name["hello_world"].repo == "noir-examples"
        assert by_name["codegen"].repo == "noir"
        assert all(e.type == "circuit" for e in examples)

    def test_filter_by_category(self, service):
        examples = service.list_examples("recursion")
        assert [e.name for e in examples] == ["inner"]

    def test_find_example_exact_then_substring(self, service):
        assert service.find_example("Hello_World").name == "hello_world"
        assert service.find_example("recurs").name == "inner"
        assert service.find_example("missing") is None


class TestReadFile:
    def test_read(self, service):
        assert service.read_file("noir/noir_stdlib/src/hash/mod.nr") == "pub fn poseidon2() {}\n"

    def test_missing(self, service):
        assert service.read_file("noir/nope.nr") is None

    def test_directory(self, service):
        assert service.read_file("noir") is None

    def test_refuses_paths_outside_mirror(self, service, tmp_path):
        (tmp_path / "secret.txt").write_text("secret")
        assert service.read_file("../secret.txt") is None
        assert service.read_file(str(tmp_path / "secret.txt")) is None


class TestLibraries:
    def test_lists_libraries_and_reference(self, service, mirror):
        make_clone(mirror, "poseidon")

        libraries = service.list_libraries()

        categories = {lib.category for lib in libraries}
        assert categories == {"libraries", "reference"}
        by_name = {lib.name: lib for lib in libraries}
        assert by_name["poseidon"].cloned
        assert not by_name["noir-bignum"].cloned
        assert "noir" not in by_name

    def test_single_category(self, service):
        libraries = service.list_libraries(Category.REFERENCE)
        assert [lib.name for lib in libraries] == ["awesome-noir"]


class TestFileType:
    @pytest.mark.parametrize("path,expected", [
        ("noir/src/main.nr", "circuit"),
        ("noir/test_programs/x/src/main.nr", "test"),
        ("bb.js/barretenberg/ts/src/index.ts", "typescript"),
        ("noir/docs/intro.mdx", "docs"),
        ("noir/Cargo.toml", "other"),
    ])
    def test_file_type(self, path, expected):
        assert file_type(path) == expected
