from pathlib import Path

from srcdigest.discovery import IgnoreMatcher, discover_sources


def _write_file(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _relative(root: Path, paths: list[Path]) -> list[str]:
    return [path.relative_to(root).as_posix() for path in paths]


def test_ph0_disc_001_sources_are_filtered_by_suffix_and_sorted(
    tmp_path: Path,
) -> None:
    _write_file(tmp_path / "src" / "Zeta.cs")
    _write_file(tmp_path / "Alpha.cs")
    _write_file(tmp_path / "src" / "Beta.cs")
    _write_file(tmp_path / "README.md")

    found = discover_sources(root_path=tmp_path, suffixes=(".cs",))

    assert _relative(tmp_path, found) == ["Alpha.cs", "src/Beta.cs", "src/Zeta.cs"]


def test_ph0_disc_002_git_directory_is_skipped(tmp_path: Path) -> None:
    _write_file(tmp_path / ".git" / "hooks" / "Hook.cs")
    _write_file(tmp_path / "Main.cs")

    found = discover_sources(root_path=tmp_path, suffixes=(".cs",))

    assert _relative(tmp_path, found) == ["Main.cs"]


def test_ph0_disc_003_gitignore_patterns_are_respected(tmp_path: Path) -> None:
    _write_file(tmp_path / ".gitignore", "bin/\n*.g.cs\n")
    _write_file(tmp_path / "nested" / ".gitignore", "/local.cs\n")
    _write_file(tmp_path / "bin" / "Generated.cs")
    _write_file(tmp_path / "Model.g.cs")
    _write_file(tmp_path / "Model.cs")
    _write_file(tmp_path / "nested" / "local.cs")
    _write_file(tmp_path / "nested" / "kept.cs")

    matcher = IgnoreMatcher.from_project_root(tmp_path)
    found = discover_sources(
        root_path=tmp_path, suffixes=(".cs",), ignore_matcher=matcher
    )

    assert _relative(tmp_path, found) == ["Model.cs", "nested/kept.cs"]


def test_ph0_disc_004_empty_tree_yields_no_sources(tmp_path: Path) -> None:
    assert discover_sources(root_path=tmp_path, suffixes=(".cs",)) == []
