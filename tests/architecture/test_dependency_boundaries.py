"""依存境界（core は GUI/ウィンドウに依存しない）の破りを検出するテスト。"""

from __future__ import annotations

import ast
from pathlib import Path


def _repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "src" / "blockfields").is_dir() and (parent / "tests").is_dir():
            return parent
    raise RuntimeError("repo root が見つからない")


def _module_name_for_path(*, path: Path, src_root: Path) -> tuple[str, bool]:
    parts = list(path.relative_to(src_root).parts)
    is_package = parts[-1] == "__init__.py"
    if is_package:
        parts = parts[:-1]
    else:
        parts[-1] = parts[-1].removesuffix(".py")
    if not parts:
        raise ValueError(f"src 直下の __init__.py はモジュール名にできない: {path}")
    return ".".join(parts), is_package


def _resolve_importfrom_targets(
    *,
    current_module: str,
    is_package: bool,
    node: ast.ImportFrom,
) -> set[str]:
    level = int(node.level or 0)
    if level == 0:
        if node.module is None:
            return set()
        base = str(node.module)
    else:
        package = current_module if is_package else current_module.rsplit(".", 1)[0]
        parts = package.split(".")
        keep = len(parts) - (level - 1)
        if keep <= 0:
            raise ValueError(
                "相対 import の解決に失敗: "
                f"current_module={current_module!r}, level={level}, module={node.module!r}"
            )
        base = ".".join(parts[:keep])
        if node.module is not None:
            base = f"{base}.{node.module}"

    targets = {base}
    targets.update(f"{base}.{alias.name}" for alias in node.names if alias.name != "*")
    return targets


def _imports_in_file(*, path: Path, src_root: Path) -> set[str]:
    current_module, is_package = _module_name_for_path(path=path, src_root=src_root)
    modules: set[str] = set()
    for node in ast.walk(ast.parse(path.read_text(encoding="utf-8"))):
        if isinstance(node, ast.Import):
            modules.update(str(alias.name) for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            modules.update(
                _resolve_importfrom_targets(
                    current_module=current_module,
                    is_package=is_package,
                    node=node,
                )
            )
    return modules


def _assert_no_forbidden_imports(*, root: Path, forbidden_prefixes: tuple[str, ...]) -> None:
    repo_root = _repo_root()
    src_root = repo_root / "src"
    violations: list[str] = []
    for path in sorted(root.rglob("*.py")):
        modules = _imports_in_file(path=path, src_root=src_root)
        bad = sorted(m for m in modules if m.startswith(forbidden_prefixes))
        if bad:
            violations.append(f"{path.relative_to(repo_root)}: {', '.join(bad)}")

    if violations:
        joined = "\n".join(violations)
        raise AssertionError(f"依存境界違反の import を検出:\n{joined}")


def test_core_does_not_depend_on_interactive_or_gui() -> None:
    root = _repo_root()
    _assert_no_forbidden_imports(
        root=root / "src" / "blockfields" / "core",
        forbidden_prefixes=("blockfields.interactive", "blockfields.api", "pyglet", "imgui"),
    )


def test_interactive_does_not_depend_on_api() -> None:
    root = _repo_root()
    _assert_no_forbidden_imports(
        root=root / "src" / "blockfields" / "interactive",
        forbidden_prefixes=("blockfields.api",),
    )


def _parse_importfrom(source: str) -> ast.ImportFrom:
    tree = ast.parse(source)
    assert len(tree.body) == 1
    node = tree.body[0]
    assert isinstance(node, ast.ImportFrom)
    return node


def test__resolve_importfrom_targets_handles_relative_imports() -> None:
    got = _resolve_importfrom_targets(
        current_module="blockfields.core.fields.resolver",
        is_package=False,
        node=_parse_importfrom("from .conditions import is_displayed\n"),
    )
    assert "blockfields.core.fields.conditions" in got

    got = _resolve_importfrom_targets(
        current_module="blockfields.core.block_loader",
        is_package=False,
        node=_parse_importfrom("from .. import interactive\n"),
    )
    assert "blockfields.interactive" in got

    got = _resolve_importfrom_targets(
        current_module="blockfields.interactive.inspector",
        is_package=True,
        node=_parse_importfrom("from .widgets import *\n"),
    )
    assert got == {"blockfields.interactive.inspector.widgets"}


def test__resolve_importfrom_targets_rejects_unresolvable_relative_imports() -> None:
    try:
        _resolve_importfrom_targets(
            current_module="blockfields",
            is_package=True,
            node=_parse_importfrom("from ...api import run\n"),
        )
    except ValueError:
        return
    raise AssertionError("解決不能な相対 import は ValueError にする")
