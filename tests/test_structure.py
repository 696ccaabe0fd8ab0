"""
Structure lint tests
Verify that the component skeleton exists and follows conventions.
"""

import importlib
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE = PROJECT_ROOT / "linkshelf"

COMPONENTS = ["cache", "capture", "credentials", "feed", "sync", "tags", "view"]


class TestProjectStructure:
    """Verify project structure follows the hexagonal layout."""

    def test_core_directories_exist(self) -> None:
        """Ports live under core, entities under domain."""
        assert (PACKAGE / "core" / "ports").is_dir()
        assert (PACKAGE / "domain").is_dir()

    def test_adapters_directory_exists(self) -> None:
        assert (PACKAGE / "adapters").is_dir()
        assert (PACKAGE / "adapters" / "http").is_dir()

    def test_app_shell_exists(self) -> None:
        for module in ("cli.py", "config.py", "context.py", "dispatcher.py"):
            assert (PACKAGE / "app_shell" / module).is_file()

    def test_tests_structure_exists(self) -> None:
        """Test directories must follow conventions."""
        assert (PROJECT_ROOT / "tests" / "unit").is_dir()
        assert (PROJECT_ROOT / "tests" / "integration").is_dir()
        assert (PROJECT_ROOT / "tests" / "regression").is_dir()

    def test_init_files_present(self) -> None:
        """Python packages must have __init__.py files."""
        packages = [
            "linkshelf",
            "linkshelf/core",
            "linkshelf/core/ports",
            "linkshelf/domain",
            "linkshelf/adapters",
            "linkshelf/adapters/http",
            "linkshelf/components",
            "linkshelf/app_shell",
        ]
        for pkg in packages:
            init_file = PROJECT_ROOT / pkg / "__init__.py"
            assert init_file.is_file(), f"Missing __init__.py in {pkg}"


class TestComponents:
    """Every component is a package exposing an explicit public API."""

    @pytest.mark.parametrize("name", COMPONENTS)
    def test_component_layout(self, name: str) -> None:
        component = PACKAGE / "components" / name
        assert (component / "__init__.py").is_file()
        assert (component / "component.py").is_file()

    @pytest.mark.parametrize("name", COMPONENTS)
    def test_component_exports(self, name: str) -> None:
        module = importlib.import_module(f"linkshelf.components.{name}")

        assert module.__all__
        for exported in module.__all__:
            assert hasattr(module, exported), f"{name} does not define {exported}"

    def test_ports_have_no_adapter_imports(self) -> None:
        """Ports depend on the domain only."""
        for port in (PACKAGE / "core" / "ports").glob("*.py"):
            source = port.read_text()
            assert "linkshelf.adapters" not in source, port.name
            assert "linkshelf.components" not in source, port.name
