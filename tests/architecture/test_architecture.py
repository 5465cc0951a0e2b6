# tests/architecture/test_architecture.py
# Architecture tests enforcing layering rules.
# - services must not import the web framework
# - routers must not touch files or the transport codec directly
# - repositories must not depend on services or routers

import ast
import pathlib

import pytest  # type: ignore[import-not-found]

REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
PACKAGE = REPO_ROOT / "filmshare"

WEB_FRAMEWORK = {"fastapi", "starlette"}


def _iter_py_files(root: pathlib.Path):
    for path in root.rglob("*.py"):
        # skip virtualenv & build outputs
        parts = {"venv", ".venv", "node_modules", "__pycache__"}
        if any(part in parts for part in path.parts):
            continue
        yield path


def _parse(py_path: pathlib.Path) -> ast.AST:
    return ast.parse(py_path.read_text(encoding="utf-8"), filename=str(py_path))


def _collect_imports(py_path: pathlib.Path) -> set[str]:
    """Return set of imported module names (full dotted path) from file."""
    imports: set[str] = set()
    for node in ast.walk(_parse(py_path)):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.add(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imports.add(node.module)
    return imports


def _top_level(imports: set[str]) -> set[str]:
    return {name.split(".")[0] for name in imports}


def _calls_open(py_path: pathlib.Path) -> bool:
    for node in ast.walk(_parse(py_path)):
        if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "open":
            return True
    return False


# ---------- Tests ----------

@pytest.mark.architecture
def test_services_do_not_import_web_framework():
    offenders = [
        f for f in _iter_py_files(PACKAGE / "services")
        if _top_level(_collect_imports(f)) & WEB_FRAMEWORK
    ]
    assert not offenders, "Services must stay framework-free; offending files:\n" + "\n".join(map(str, offenders))


@pytest.mark.architecture
def test_routers_do_not_touch_files_or_codec():
    offenders: list[pathlib.Path] = []
    for f in _iter_py_files(PACKAGE / "routers"):
        imports = _collect_imports(f)
        if {"os", "json", "lzstring"} & _top_level(imports) or _calls_open(f):
            offenders.append(f)
        if "filmshare.services.transport_codec" in imports:
            offenders.append(f)
    assert not offenders, "Routers must go through services; offending files:\n" + "\n".join(map(str, offenders))


@pytest.mark.architecture
def test_repositories_do_not_depend_on_upper_layers():
    for f in _iter_py_files(PACKAGE / "repositories"):
        imports = _collect_imports(f)
        assert not any(name.startswith("filmshare.routers") for name in imports), f
        assert not any(name.startswith("filmshare.services.favorites") for name in imports), f
        assert not _top_level(imports) & WEB_FRAMEWORK, f


@pytest.mark.architecture
def test_codec_library_is_wrapped_in_one_module():
    users = [
        f.relative_to(REPO_ROOT).as_posix()
        for f in _iter_py_files(PACKAGE)
        if "lzstring" in _top_level(_collect_imports(f))
    ]
    assert users == ["filmshare/services/transport_codec.py"]
