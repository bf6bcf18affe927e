"""Unit tests for httpimport.paths."""

from __future__ import annotations

from pathlib import Path

from httpimport.paths import artifact_path, ensure_extension, path_for

ROOT = Path("/cache")


class TestPathFor:
    def test_scheme_host_and_segments(self) -> None:
        assert path_for("https://example.com/a/b/mod.ts", ROOT) == Path(
            "/cache/https/example.com/a/b/mod.ts"
        )

    def test_explicit_port_kept(self) -> None:
        assert path_for("http://localhost:8080/mod.js", ROOT) == Path(
            "/cache/http/localhost:8080/mod.js"
        )

    def test_default_port_dropped(self) -> None:
        assert path_for("https://example.com:443/mod.js", ROOT) == path_for(
            "https://example.com/mod.js", ROOT
        )

    def test_empty_segments_dropped(self) -> None:
        assert path_for("https://example.com//a///b/", ROOT) == Path("/cache/https/example.com/a/b")

    def test_query_and_fragment_ignored(self) -> None:
        assert path_for("https://example.com/mod.ts?target=es2022#x", ROOT) == Path(
            "/cache/https/example.com/mod.ts"
        )

    def test_dot_segments_cannot_escape_root(self) -> None:
        path = path_for("https://example.com/a/../../../etc/passwd", ROOT)
        assert path == Path("/cache/https/example.com/etc/passwd")

    def test_scheme_is_part_of_identity(self) -> None:
        assert path_for("http://example.com/m.js", ROOT) != path_for("https://example.com/m.js", ROOT)

    def test_deterministic(self) -> None:
        url = "https://esm.sh/v135/preact@10.19.2/es2022/preact.mjs"
        assert path_for(url, ROOT) == path_for(url, ROOT)


class TestEnsureExtension:
    def test_keeps_matching_extension(self) -> None:
        path = path_for("https://example.com/mod.ts", ROOT)
        assert ensure_extension(path, "https://example.com/mod.ts") == path

    def test_appends_default_for_bare_path(self) -> None:
        path = path_for("https://esm.sh/react", ROOT)
        assert ensure_extension(path, "https://esm.sh/react") == Path("/cache/https/esm.sh/react.js")

    def test_appends_to_unknown_suffix(self) -> None:
        path = path_for("https://example.com/pkg@1.2.3", ROOT)
        assert ensure_extension(path, "https://example.com/pkg@1.2.3").name == "pkg@1.2.3.js"

    def test_explicit_extension(self) -> None:
        path = path_for("https://example.com/mod", ROOT)
        assert ensure_extension(path, "https://example.com/mod", ".ts").name == "mod.ts"

    def test_declaration_url(self) -> None:
        assert artifact_path("https://example.com/mod.d.ts", ROOT).name == "mod.d.ts"
