# tests/test_smoke.py
import importlib
import os
import sys
import traceback
from pathlib import Path

# Avoid GUI crashes in headless CI (Qt/PySide/PyQt etc.)
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

IGNORE_DIR_NAMES = {"__pycache__", ".venv", "venv", ".pytest_cache", "build", "dist"}


def discover_module_names(src_dir: Path):
    for path in src_dir.rglob("*.py"):
        if any(part in IGNORE_DIR_NAMES for part in path.parts):
            continue
        rel = path.relative_to(src_dir).with_suffix("")
        parts = list(rel.parts)
        if parts[-1] == "__init__":
            parts = parts[:-1]
        if not parts or any(p.startswith("_") for p in parts):
            continue
        yield ".".join(parts)


def _import_all(src_dir: Path):
    if str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))  # make 'frontend', 'backend', 'core' top-level
    failed = []
    for mod_name in sorted(set(discover_module_names(src_dir))):
        try:
            importlib.import_module(mod_name)
        except Exception:
            print(f"Failed to import: {mod_name}")
            traceback.print_exc()
            failed.append(mod_name)
    return failed


def test_smoke_imports():
    src_dir = (Path(__file__).parent.parent / "src").resolve()
    failed = _import_all(src_dir)
    assert not failed, f"{len(failed)} module(s) failed to import: {failed}"


def test_public_names_resolve():
    import backend.services as services

    for name in services.__all__:
        assert getattr(services, name) is not None


if __name__ == "__main__":
    missing = _import_all((Path(__file__).parent.parent / "src").resolve())
    raise SystemExit(1 if missing else 0)
