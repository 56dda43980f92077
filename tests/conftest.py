"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
import types
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local stubforge package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of stubforge modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("stubforge"):
        del sys.modules[module_name]


class User:
    """Opaque reference type used by sample contracts."""

    def __init__(self, id: int = 0) -> None:
        self.id = id


class Order:
    """Second opaque reference type."""


@pytest.fixture
def user_service() -> Any:
    """A contract touching every member kind."""
    from stubforge.contract import ContractType, MemberContract, TypeDescriptor
    from stubforge.contract.catalog import BOOL, INT, OBJECT, STR, awaitable, out, param

    user = TypeDescriptor.reference("User")
    return ContractType(
        "IUserService",
        members=(
            MemberContract.method("GetUser", param("id", INT), returns=user),
            MemberContract.method("Save", param("user", user)),
            MemberContract.method("Count", returns=INT),
            MemberContract.method("Add", param("a", INT), param("b", INT), returns=INT),
            MemberContract.method("Add", param("a", INT), returns=INT),
            MemberContract.method("TryGet", param("key", STR), out("value", INT), returns=BOOL),
            MemberContract.method("FetchAsync", param("id", INT), returns=awaitable(INT)),
            MemberContract.method("LoadAsync", param("id", INT), returns=awaitable(user)),
            MemberContract.method("FlushAsync", returns=awaitable()),
            MemberContract.prop("Name", STR),
            MemberContract.prop("Current", user, writable=False),
            MemberContract.indexer(param("key", STR), INT),
            MemberContract.event("Changed", param("sender", OBJECT)),
            MemberContract.generic_method(
                "Convert",
                ("T",),
                param("json", STR),
                returns=TypeDescriptor.type_parameter("T"),
            ),
        ),
    )


@pytest.fixture
def compile_unit() -> Callable[..., types.ModuleType]:
    """Generate a unit and execute the emitted module.

    Each call yields a fresh module, so author overrides registered on its
    classes never leak between tests.
    """
    from stubforge.pipeline import generate

    def _compile(unit: Any, **kwargs: Any) -> types.ModuleType:
        result = generate(unit, **kwargs)
        assert result.ok, [d.message for d in result.diagnostics]
        module = types.ModuleType(f"generated_{unit.name}")
        module.__dict__["User"] = User
        module.__dict__["Order"] = Order
        exec(compile(result.text, f"<generated {unit.name}>", "exec"), module.__dict__)
        return module

    return _compile
