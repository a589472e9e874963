#!/usr/bin/env python3
"""Validate the ttlstore import graph.

Checks:
1. No circular dependencies
2. Layer rules respected (lower → higher forbidden)

Imports under `if TYPE_CHECKING:` are annotations only and are ignored.
"""

import ast
import sys
from pathlib import Path

LAYERS = {
    0: ["ttlstore/time.py", "ttlstore/exceptions.py"],
    1: ["ttlstore/entry.py", "ttlstore/config.py"],
    2: ["ttlstore/store.py", "ttlstore/dispatch.py", "ttlstore/metrics.py"],
    3: ["ttlstore/evictor.py"],
    4: ["ttlstore/cache.py", "ttlstore/__init__.py"],
}


def get_module_layer(module_path: str) -> int | None:
    """Determine which layer a module belongs to."""
    for layer, patterns in LAYERS.items():
        for pattern in patterns:
            if module_path == pattern or module_path == pattern.replace(".py", ""):
                return layer
    return None


def _is_type_checking_block(node: ast.AST) -> bool:
    if not isinstance(node, ast.If):
        return False
    test = node.test
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    return isinstance(test, ast.Attribute) and test.attr == "TYPE_CHECKING"


def extract_imports(file_path: Path) -> list[str]:
    """Extract runtime imports from a Python file, resolving relative ones."""
    try:
        tree = ast.parse(file_path.read_text(encoding="utf-8"))
    except (SyntaxError, UnicodeDecodeError):
        return []

    package = file_path.parent.name
    imports: list[str] = []

    def walk(node: ast.AST) -> None:
        for child in ast.iter_child_nodes(node):
            if _is_type_checking_block(child):
                continue
            if isinstance(child, ast.Import):
                imports.extend(alias.name for alias in child.names)
            elif isinstance(child, ast.ImportFrom):
                if child.level and child.module:
                    imports.append(f"{package}.{child.module}")
                elif child.module:
                    imports.append(child.module)
            walk(child)

    walk(tree)
    return imports


def check_circular_deps(imports: dict[str, set[str]]) -> list[str]:
    """Detect circular dependencies using DFS."""
    errors = []

    def visit(module: str, path: list[str]) -> None:
        if module in path:
            cycle = " → ".join(path + [module])
            errors.append(f"CIRCULAR DEPENDENCY: {cycle}")
            return

        if module not in imports:
            return

        for dep in imports[module]:
            visit(dep, path + [module])

    for module in imports:
        visit(module, [])

    return errors


def check_layer_violations(file_path: Path, imports: list[str], repo_root: Path) -> list[str]:
    """Check if imports violate layer rules (lower → higher forbidden)."""
    errors = []

    rel_path = file_path.relative_to(repo_root).as_posix()
    module_layer = get_module_layer(rel_path)

    if module_layer is None:
        return []

    for imp in imports:
        if not imp.startswith("ttlstore."):
            continue  # External import

        import_layer = get_module_layer(imp.replace(".", "/"))
        if import_layer is None:
            continue

        if import_layer > module_layer:
            errors.append(f"LAYER VIOLATION: {rel_path} (layer {module_layer}) imports {imp} (layer {import_layer})")

    return errors


def validate(repo_root: Path) -> tuple[list[str], int]:
    errors: list[str] = []
    python_files = [f for f in repo_root.glob("ttlstore/**/*.py") if "__pycache__" not in str(f)]

    all_imports: dict[str, set[str]] = {}
    for file in python_files:
        imports = extract_imports(file)
        module_name = file.relative_to(repo_root).as_posix().replace("/", ".").removesuffix(".py")
        all_imports[module_name] = {i for i in imports if i.startswith("ttlstore.")}
        errors.extend(check_layer_violations(file, imports, repo_root))

    errors.extend(check_circular_deps(all_imports))
    return errors, len(python_files)


def main() -> int:
    repo_root = Path(__file__).parent.parent

    print("🔍 Validating code dependencies...")
    errors, checked = validate(repo_root)

    if errors:
        print("\n❌ Dependency validation failed:\n")
        for error in errors:
            print(f"  {error}")
        print(f"\n{len(errors)} violation(s) found.")
        return 1

    print("✅ No circular dependencies or layer violations detected.")
    print(f"   Checked {checked} Python files.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
