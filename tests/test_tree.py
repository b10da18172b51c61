import asyncio
import itertools
import os
import random
import sys
import unittest

# Add test directory to path for shared helpers
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from helpers import FakeEntry, scenario_entries
from archive_analyzer.config import ArchiveAnalyzerError, DecodeFailure
from archive_analyzer.core.aggregator import iter_files, summarize
from archive_analyzer.core.result_types import ROOT_NAME, DirectoryNode, FileNode, Summary
from archive_analyzer.core.sorter import sort_tree
from archive_analyzer.core.tree import TreeBuilder, build_tree, decode_line_counts
from archive_analyzer.utils import render_tree


def walk(root: DirectoryNode):
    """Yield (node, parent) for every node below root."""
    stack = [root]
    while stack:
        directory = stack.pop()
        for child in directory.children:
            yield child, directory
            if isinstance(child, DirectoryNode):
                stack.append(child)


def directory_paths(root: DirectoryNode) -> list[str]:
    return [""] + [node.path for node, _ in walk(root) if isinstance(node, DirectoryNode)]


class TestTreeBuilder(unittest.TestCase):
    def test_root_is_seeded(self):
        """Test that a new builder starts with the synthetic root registered at ''."""
        builder = TreeBuilder()
        self.assertEqual(builder.root.name, ROOT_NAME)
        self.assertEqual(builder.root.path, "")
        self.assertIs(builder.ensure_directory(""), builder.root)

    def test_ensure_directory_synthesizes_ancestors(self):
        """Test that ensure_directory creates every missing ancestor in order."""
        builder = TreeBuilder()
        node = builder.ensure_directory("a/b/c")

        self.assertEqual((node.name, node.path), ("c", "a/b/c"))
        a = builder.root.children[0]
        self.assertEqual(a.path, "a")
        self.assertEqual(a.children[0].path, "a/b")
        self.assertIs(a.children[0].children[0], node)

    def test_ensure_directory_returns_same_instance(self):
        """Test that repeated lookups of one path resolve to the identical node."""
        builder = TreeBuilder()
        first = builder.ensure_directory("x/y")
        self.assertIs(builder.ensure_directory("x/y"), first)
        self.assertIs(builder.add_directory(["x", "y"]), first)
        self.assertEqual(len(builder.root.children), 1)
        self.assertEqual(len(builder.root.children[0].children), 1)

    def test_add_file_classifies_and_counts(self):
        """Test that add_file classifies by extension and feeds the running totals."""
        builder = TreeBuilder()
        java = builder.add_file(["src", "Main.JAVA"], 12)
        blob = builder.add_file(["lib", "tool.jar"])

        self.assertEqual(java.extension, "java")
        self.assertTrue(java.analyzable)
        self.assertEqual(java.line_count, 12)
        self.assertEqual(blob.extension, "jar")
        self.assertFalse(blob.analyzable)
        self.assertIsNone(blob.line_count)
        self.assertEqual(builder.summary, Summary(2, 1, 1, 12))

    def test_opaque_file_ignores_line_count(self):
        """Test that a non-analyzable file never carries a line count."""
        builder = TreeBuilder()
        node = builder.add_file(["image.png"], 99)
        self.assertIsNone(node.line_count)

    def test_analyzable_file_requires_line_count(self):
        """Test that attaching an analyzable file without a line count is rejected."""
        builder = TreeBuilder()
        with self.assertRaises(ArchiveAnalyzerError):
            builder.add_file(["notes.md"])

    def test_duplicate_file_path_attached_once(self):
        """Test that a second file with the same path is ignored."""
        builder = TreeBuilder()
        builder.add_file(["a", "b.txt"], 1)
        with self.assertLogs("archive_analyzer.core.tree", level="WARNING"):
            self.assertIsNone(builder.add_file(["a", "b.txt"], 1))
        self.assertEqual(len(builder.ensure_directory("a").children), 1)
        self.assertEqual(builder.summary.total_files, 1)


class TestBuildTree(unittest.IsolatedAsyncioTestCase):
    async def test_end_to_end_scenario(self):
        """Test the full build for a source file, an explicit empty directory and a binary file."""
        root, summary = await build_tree(scenario_entries())
        sort_tree(root)

        self.assertEqual([c.name for c in root.children], ["src", "README.bin"])
        src, readme = root.children
        self.assertIsInstance(src, DirectoryNode)
        self.assertIsInstance(readme, FileNode)
        self.assertFalse(readme.analyzable)
        self.assertIsNone(readme.line_count)

        self.assertEqual([c.name for c in src.children], ["util", "Main.java"])
        util, main = src.children
        self.assertIsInstance(util, DirectoryNode)
        self.assertEqual(util.children, [])
        self.assertEqual(util.path, "src/util")
        self.assertEqual(main.path, "src/Main.java")
        self.assertEqual(main.line_count, 3)
        self.assertTrue(main.analyzable)

        self.assertEqual(summary, Summary(
            total_files=2, analyzable_file_count=1, opaque_file_count=1, total_line_count=3
        ))

    async def test_empty_archive(self):
        """Test that an empty archive yields an empty root and a zero summary."""
        root, summary = await build_tree([])
        self.assertEqual(root.children, [])
        self.assertEqual(summary, Summary(0, 0, 0, 0))

    async def test_opaque_files_are_never_decoded(self):
        """Test that only analyzable files are decoded."""
        entries = [FakeEntry("bin/app.exe", error=AssertionError("decoded")), FakeEntry("a.txt", "x")]
        root, summary = await build_tree(entries)
        self.assertEqual(entries[0].decode_calls, 0)
        self.assertEqual(entries[1].decode_calls, 1)
        self.assertEqual(summary.opaque_file_count, 1)

    async def test_explicit_and_implicit_directory_materialized_once(self):
        """Test that a directory listed explicitly and implied by a file exists once, in any entry order."""
        names = ["a/b/c.txt", "a/", "a/b/", "a\\b\\d.md"]
        for order in itertools.permutations(names):
            with self.subTest(order=order):
                entries = [
                    FakeEntry(n, is_dir=n.endswith("/"), text="line") for n in order
                ]
                root, _ = await build_tree(entries)
                paths = directory_paths(root)
                self.assertEqual(sorted(paths), ["", "a", "a/b"])
                self.assertEqual(len(paths), len(set(paths)))

    async def test_ancestor_completeness_and_path_invariant(self):
        """Test that every node path is its parent path plus its name and all ancestors exist."""
        entries = [
            FakeEntry("deep/er/still/file.css", text="body {}"),
            FakeEntry("x\\y\\z.bin", text=None),
            FakeEntry("top.js", text="1\n2"),
            FakeEntry("only/dirs/here/", is_dir=True),
        ]
        root, _ = await build_tree(entries)
        dirs = set(directory_paths(root))

        for node, parent in walk(root):
            expected = node.name if parent.path == "" else f"{parent.path}/{node.name}"
            self.assertEqual(node.path, expected)
            segments = node.path.split("/")
            for i in range(1, len(segments)):
                self.assertIn("/".join(segments[:i]), dirs)

    async def test_entries_without_path_are_skipped(self):
        """Test that entries normalizing to no segments are skipped with a warning."""
        entries = [FakeEntry("/", is_dir=True), FakeEntry("", is_dir=True), FakeEntry("a.txt", "x")]
        with self.assertLogs("archive_analyzer.core.tree", level="WARNING"):
            root, summary = await build_tree(entries)
        self.assertEqual([c.name for c in root.children], ["a.txt"])
        self.assertNotIn(root, root.children)
        self.assertEqual(summary.total_files, 1)

    async def test_dot_dot_is_a_literal_name(self):
        """Test that '..' is kept as an ordinary directory name."""
        root, _ = await build_tree([FakeEntry("../evil.txt", text="x")])
        self.assertEqual(root.children[0].name, "..")
        self.assertEqual(root.children[0].children[0].path, "../evil.txt")

    async def test_decode_failure_aborts_run(self):
        """Test that a decode failure propagates instead of producing a partial tree."""
        entries = [
            FakeEntry("ok.txt", "fine"),
            FakeEntry("broken.md", error=DecodeFailure("broken.md", "bad data")),
        ]
        with self.assertRaises(DecodeFailure) as ctx:
            await build_tree(entries)
        self.assertEqual(ctx.exception.entry_name, "broken.md")

    async def test_foreign_decoder_errors_become_decode_failures(self):
        """Test that arbitrary decoder exceptions are wrapped in DecodeFailure."""
        entries = [FakeEntry("a.html", error=ValueError("truncated stream"))]
        with self.assertRaises(DecodeFailure) as ctx:
            await build_tree(entries)
        self.assertEqual(ctx.exception.entry_name, "a.html")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    async def test_failure_cancels_outstanding_decodes(self):
        """Test that the first failure cancels decodes still in flight."""
        slow = FakeEntry("b/slow.txt", "x", delay=30)
        failing = FakeEntry("a/fail.txt", error=DecodeFailure("a/fail.txt"))
        with self.assertRaises(DecodeFailure):
            await asyncio.wait_for(build_tree([slow, failing], max_concurrency=4), timeout=5)
        self.assertFalse(slow.finished)

    async def test_result_independent_of_completion_order(self):
        """Test that tree and summary do not depend on entry or completion order."""
        names = [
            "src/app/main.js", "src/app/util.js", "src/README.md", "docs/index.html",
            "docs/img/logo.png", "src/app/", "LICENSE", "notes.txt", "src/style.css",
        ]
        rendered = set()
        summaries = set()
        for seed in range(5):
            rng = random.Random(seed)
            entries = [
                FakeEntry(n, text="l\n" * len(n), is_dir=n.endswith("/"),
                          delay=rng.random() / 100)
                for n in rng.sample(names, len(names))
            ]
            root, summary = await build_tree(entries, max_concurrency=3)
            rendered.add(render_tree(sort_tree(root)))
            summaries.add(summary)
        self.assertEqual(len(rendered), 1)
        self.assertEqual(len(summaries), 1)

    async def test_concurrency_is_bounded(self):
        """Test that no more than max_concurrency decodes run at once."""
        in_flight = 0
        peak = 0

        class CountingEntry(FakeEntry):
            async def decode_as_text(self):
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return "x"

        entries = [CountingEntry(f"f{i}.txt") for i in range(10)]
        counts = await decode_line_counts(entries, max_concurrency=3)
        self.assertEqual(counts, [1] * 10)
        self.assertLessEqual(peak, 3)
        self.assertGreater(peak, 1)

    async def test_progress_callback(self):
        """Test that the progress callback receives name, lines, done and total."""
        seen = []
        await build_tree(scenario_entries(), on_decoded=lambda *args: seen.append(args))
        self.assertEqual(seen, [("src/Main.java", 3, 1, 1)])

    async def test_corrupt_duplicate_is_never_decoded(self):
        """Test that a duplicate spelling of a normalized path is dropped before decoding."""
        corrupt = FakeEntry("a//b.txt", error=DecodeFailure("a//b.txt", "bad data"))
        good = FakeEntry("a/b.txt", text="1\n2")
        with self.assertLogs("archive_analyzer.core.tree", level="WARNING"):
            root, summary = await build_tree([good, corrupt])

        self.assertEqual(corrupt.decode_calls, 0)
        node = root.children[0].children[0]
        self.assertEqual((node.path, node.line_count), ("a/b.txt", 2))
        self.assertEqual(summary, Summary(1, 1, 0, 2))

    async def test_first_duplicate_wins_without_canonical_spelling(self):
        """Test that among non-normalized duplicates only the first in path order is decoded."""
        backslashed = FakeEntry("a\\b.txt", text="x")
        doubled = FakeEntry("a//b.txt", text="x\ny")
        with self.assertLogs("archive_analyzer.core.tree", level="WARNING"):
            root, summary = await build_tree([backslashed, doubled])
        self.assertEqual((doubled.decode_calls, backslashed.decode_calls), (1, 0))
        self.assertEqual(summary.total_line_count, 2)

    async def test_invalid_concurrency(self):
        """Test that a concurrency limit below one is rejected."""
        with self.assertRaises(ValueError):
            await decode_line_counts([], max_concurrency=0)


class TestSortTree(unittest.TestCase):
    def _dir(self, name, *children):
        return DirectoryNode(name=name, path=name, children=list(children))

    def _file(self, name):
        return FileNode(name=name, path=name, extension="", line_count=None, analyzable=False)

    def test_directories_before_files(self):
        """Test that directories precede files among siblings."""
        root = self._dir("", self._file("a"), self._dir("z"), self._file("b"), self._dir("m"))
        sort_tree(root)
        self.assertEqual([c.name for c in root.children], ["m", "z", "a", "b"])

    def test_case_and_accent_insensitive_order(self):
        """Test that case and accents only break ties, lowercase first."""
        root = self._dir(
            "",
            self._file("zeta.txt"),
            self._file("Éclair.txt"),
            self._file("apple.txt"),
            self._file("Beta.md"),
            self._file("alpha.md"),
            self._file("Alpha.md"),
        )
        sort_tree(root)
        self.assertEqual(
            [c.name for c in root.children],
            ["alpha.md", "Alpha.md", "apple.txt", "Beta.md", "Éclair.txt", "zeta.txt"],
        )

    def test_punctuation_symbols_digits_letters(self):
        """Test that punctuation sorts before symbols, symbols before digits and digits before letters."""
        root = self._dir(
            "",
            self._file("1.txt"),
            self._file("_config.yml"),
            self._file("~notes"),
            self._file("a.txt"),
        )
        sort_tree(root)
        self.assertEqual(
            [c.name for c in root.children], ["_config.yml", "~notes", "1.txt", "a.txt"]
        )

    def test_character_class_applies_inside_names(self):
        """Test that class ranking is applied at every position, not only the first."""
        root = self._dir(
            "",
            self._dir("~notes"),
            self._dir("__tests__"),
            self._dir("_config"),
            self._dir("~$file"),
            self._file("ab.txt"),
            self._file("a1.txt"),
            self._file("a.txt"),
        )
        sort_tree(root)
        self.assertEqual(
            [c.name for c in root.children],
            ["__tests__", "_config", "~$file", "~notes", "a.txt", "a1.txt", "ab.txt"],
        )

    def test_sorts_recursively(self):
        """Test that nested directories are sorted too."""
        inner = self._dir("inner", self._file("y"), self._file("x"))
        root = self._dir("", inner)
        sort_tree(root)
        self.assertEqual([c.name for c in inner.children], ["x", "y"])

    def test_idempotent(self):
        """Test that sorting a sorted tree changes nothing."""
        inner = self._dir("b", self._file("d"), self._dir("c"))
        root = self._dir("", self._file("Z"), inner, self._file("a"))
        sort_tree(root)
        first = [c.name for c in root.children] + [c.name for c in inner.children]
        sort_tree(root)
        second = [c.name for c in root.children] + [c.name for c in inner.children]
        self.assertEqual(first, second)
        self.assertEqual(first, ["b", "a", "Z", "c", "d"])


class TestAggregator(unittest.IsolatedAsyncioTestCase):
    async def test_walk_matches_incremental_totals(self):
        """Test that the tree walk and the running totals agree."""
        entries = [
            FakeEntry("a/one.txt", "1\n2\n3"),
            FakeEntry("a/b/two.md", ""),
            FakeEntry("a/b/c/three.java", "x\r\ny"),
            FakeEntry("bin/tool", None),
            FakeEntry("img/logo.svg", None),
            FakeEntry("index.html", "<p>\n"),
        ]
        root, incremental = await build_tree(entries)
        walked = summarize(root)

        self.assertEqual(walked, incremental)
        self.assertEqual(walked.total_files, len(list(iter_files(root))))
        self.assertEqual(walked.total_files, walked.analyzable_file_count + walked.opaque_file_count)
        self.assertEqual(walked, Summary(6, 4, 2, 3 + 0 + 2 + 2))

    def test_empty_tree(self):
        """Test that summarizing a bare root gives all zeros."""
        self.assertEqual(summarize(DirectoryNode(name=ROOT_NAME)), Summary())


if __name__ == '__main__':
    unittest.main()
