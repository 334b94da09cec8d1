"""
Search service for repomirror.

Finds text in the mirror with ripgrep when it is installed and working,
and with an in-process scan otherwise. Both paths go through the same
normalizer, so results have the same shape and the same cap.

Docs and stdlib search are parameterizations of search_code().
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from ..catalog import BASE_PINS, EXAMPLES_REPO, NOIR_REPO
from ..domain.pin import Category
from ..domain.search import FileInfo, LibraryEntry, SearchResult
from ..infra.matcher import LineMatcher, MatcherUnavailable, RipgrepMatcher, ScanMatcher
from ..normalizer import normalize, relative_to_root
from .mirror_store import MirrorStore

logger = logging.getLogger(__name__)

DEFAULT_CODE_PATTERN = "*.nr"
DOCS_PATTERN = "*.{md,mdx}"
STDLIB_DIR = "noir_stdlib"
DOCS_DIR = "docs"
CIRCUIT_ENTRY = "src/main.nr"


def file_type(path: str) -> str:
    """Classify a file as circuit, test, typescript, docs or other."""
    ext = os.path.splitext(path)[1].lower()
    lower_path = path.lower()

    if ext == ".nr":
        return "test" if "test" in lower_path else "circuit"
    if ext in (".ts", ".tsx"):
        return "typescript"
    if ext in (".md", ".mdx"):
        return "docs"
    return "other"


class SearchService:
    """
    Text search and file lookup over the mirror.

    Example:
        service = SearchService(MirrorStore(root))
        for result in service.search_code("fn main", max_results=5):
            print(result.file, result.line, result.content)
    """

    def __init__(
        self,
        store: MirrorStore,
        primary: Optional[LineMatcher] = None,
        fallback: Optional[LineMatcher] = None,
        default_max_results: int = 50,
    ):
        self.store = store
        self.primary = primary or RipgrepMatcher()
        self.fallback = fallback or ScanMatcher()
        self.walker = ScanMatcher()
        self.default_max_results = default_max_results

    @property
    def root(self) -> Path:
        return self.store.root

    def _within_mirror(self, path: Path) -> bool:
        root = self.root.resolve()
        resolved = path.resolve()
        return resolved == root or root in resolved.parents

    def search_code(
        self,
        query: str,
        file_pattern: str = DEFAULT_CODE_PATTERN,
        repo: Optional[str] = None,
        max_results: Optional[int] = None,
        case_sensitive: bool = False,
    ) -> List[SearchResult]:
        """
        Search mirrored files for lines matching query.

        Args:
            query: Regex, or literal text when not valid regex
            file_pattern: Glob applied at any depth (e.g. "*.nr", "*.{md,mdx}")
            repo: Mirror-relative subpath to scope the search (e.g. "noir/docs")
            max_results: Cap on returned results
            case_sensitive: Match case exactly

        Returns:
            Results in scan order; empty if the search root does not exist
        """
        if max_results is None:
            max_results = self.default_max_results
        search_root = self.root / repo if repo else self.root

        if not self._within_mirror(search_root):
            logger.warning(f"Refusing to search outside the mirror: {repo}")
            return []
        if not search_root.exists() or max_results <= 0:
            return []

        if self.primary.available():
            try:
                matches = self.primary.match(query, search_root, file_pattern, max_results, case_sensitive)
                return normalize(matches, self.root, max_results)
            except MatcherUnavailable as e:
                logger.debug(f"{self.primary.name} unavailable, scanning instead: {e}")

        matches = self.fallback.match(query, search_root, file_pattern, max_results, case_sensitive)
        return normalize(matches, self.root, max_results)

    def search_docs(
        self,
        query: str,
        section: Optional[str] = None,
        max_results: int = 30,
    ) -> List[SearchResult]:
        """Search noir's markdown docs, optionally within one docs section."""
        scope = NOIR_REPO
        if section:
            section_scope = f"{NOIR_REPO}/{DOCS_DIR}/{section}"
            if (self.root / section_scope).exists():
                scope = section_scope

        return self.search_code(query, file_pattern=DOCS_PATTERN, repo=scope, max_results=max_results)

    def search_stdlib(self, query: str, max_results: int = 30) -> List[SearchResult]:
        """Search the Noir standard library sources."""
        scope = f"{NOIR_REPO}/{STDLIB_DIR}"
        if not (self.root / scope).exists():
            return []
        return self.search_code(query, file_pattern=DEFAULT_CODE_PATTERN, repo=scope, max_results=max_results)

    def find_circuits(self, base: Path, repo_name: str) -> List[FileInfo]:
        """Find `<project>/src/main.nr` circuits under base."""
        circuits = []
        for path in self.walker.iter_files(base, "main.nr"):
            relative = relative_to_root(str(path), self.root)
            if not relative.endswith("/" + CIRCUIT_ENTRY):
                continue
            parts = relative.split('/')
            src_index = parts.index("src") if "src" in parts else -1
            name = parts[src_index - 1] if src_index > 0 else parts[-2]
            circuits.append(FileInfo(path=relative, name=name, repo=repo_name, type="circuit"))
        return circuits

    def list_examples(self, category: Optional[str] = None) -> List[FileInfo]:
        """List example circuits from noir-examples and noir/examples."""
        examples = []

        examples_path = self.store.path_for(EXAMPLES_REPO)
        if examples_path.exists():
            examples.extend(self.find_circuits(examples_path, EXAMPLES_REPO))

        noir_examples_path = self.store.path_for(NOIR_REPO) / "examples"
        if noir_examples_path.exists():
            examples.extend(self.find_circuits(noir_examples_path, NOIR_REPO))

        if category:
            needle = category.lower()
            examples = [
                e for e in examples
                if needle in e.name.lower() or needle in e.path.lower()
            ]
        return examples

    def find_example(self, name: str) -> Optional[FileInfo]:
        """Find an example by exact name, then by substring of name or path."""
        examples = self.list_examples()
        needle = name.lower()

        for example in examples:
            if example.name.lower() == needle:
                return example
        for example in examples:
            if needle in example.name.lower() or needle in example.path.lower():
                return example
        return None

    def read_file(self, path: str) -> Optional[str]:
        """
        Read a mirror file by mirror-relative path.

        Paths that resolve outside the mirror root are refused.
        """
        full_path = (self.root / path).resolve()
        if not self._within_mirror(full_path):
            logger.warning(f"Refusing to read outside the mirror: {path}")
            return None
        if not full_path.is_file():
            return None
        try:
            return full_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Could not read {full_path}: {e}")
            return None

    def list_libraries(self, category: Optional[Category] = None) -> List[LibraryEntry]:
        """Library and reference repositories with their clone state."""
        categories = [category] if category else [Category.LIBRARIES, Category.REFERENCE]
        return [
            LibraryEntry(
                name=pin.name,
                description=pin.description,
                category=pin.category.value,
                url=pin.url,
                cloned=self.store.exists(pin.name),
            )
            for pin in BASE_PINS
            if pin.category in categories
        ]
