from __future__ import annotations

import ast
from pathlib import Path


def _package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _iter_source_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts and rel.parts[0] == "test":
            continue
        if "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        if not isinstance(func, ast.Attribute):
            continue
        if func.attr not in {"run", "call", "check_call", "check_output", "Popen"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def _imports(tree: ast.AST) -> list[tuple[str, int]]:
    found: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.extend((alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            found.append((node.module, node.lineno))
    return found


def test_subprocess_only_in_process_module() -> None:
    root = _package_root()
    offenders: list[str] = []
    for path in _iter_source_files(root):
        rel = path.relative_to(root).as_posix()
        if rel == "platform/process.py":
            continue
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        offenders.extend(f"{rel}:{line}" for line in _direct_subprocess_calls(tree))

    assert not offenders, "direct subprocess calls:\n" + "\n".join(offenders)


def test_rich_only_in_console_module() -> None:
    root = _package_root()
    offenders: list[str] = []
    for path in _iter_source_files(root):
        rel = path.relative_to(root).as_posix()
        if rel == "output/console.py":
            continue
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for module, line in _imports(tree):
            if module == "rich" or module.startswith("rich."):
                offenders.append(f"{rel}:{line}: {module}")

    assert not offenders, "direct rich imports:\n" + "\n".join(offenders)
