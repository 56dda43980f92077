"""Base classes for generated doubles and their interceptor containers."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, ClassVar

from stubforge.runtime.tracking import Interceptor


class Spy:
    """Holds a double's interceptors as attributes.

    Qualified aliases point at the same interceptor object, so iteration
    yields each interceptor once.
    """

    def interceptors(self) -> Iterator[Interceptor]:
        seen: set[int] = set()
        for value in vars(self).values():
            if isinstance(value, Interceptor) and id(value) not in seen:
                seen.add(id(value))
                yield value

    def reset_tracking(self) -> None:
        for interceptor in self.interceptors():
            interceptor.reset_tracking()

    def reset_callback(self) -> None:
        for interceptor in self.interceptors():
            interceptor.reset_callback()

    def reset(self) -> None:
        for interceptor in self.interceptors():
            interceptor.reset()


class StubBase:
    """Base of every generated double."""

    strict: ClassVar[bool] = False
    # Interceptor name -> class carrying its author-override slots.
    _interceptor_types: ClassVar[dict[str, type[Interceptor]]] = {}

    def make_strict(self) -> Any:
        self.strict = True  # type: ignore[misc]
        return self

    @classmethod
    def override(
        cls, interceptor: str, accessor: str | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an author override shared by every instance.

        Example::

            @UserServiceStub.override("GetUser")
            def get_user(stub, id):
                return User(id)

            @UserServiceStub.override("Name", accessor="get")
            def name(stub):
                return "fixed"
        """
        target, slot = cls._override_slot(interceptor, accessor)

        def register(func: Callable[..., Any]) -> Callable[..., Any]:
            setattr(target, slot, func)
            return func

        return register

    @classmethod
    def clear_override(cls, interceptor: str, accessor: str | None = None) -> None:
        target, slot = cls._override_slot(interceptor, accessor)
        setattr(target, slot, None)

    @classmethod
    def _override_slot(cls, interceptor: str, accessor: str | None) -> tuple[type, str]:
        target = cls._interceptor_types.get(interceptor)
        if target is None:
            known = ", ".join(sorted(cls._interceptor_types)) or "none"
            raise KeyError(f"{cls.__name__} has no interceptor {interceptor!r} (known: {known})")
        slot = "override" if accessor is None else f"override_{accessor}"
        if slot not in target.override_slots:
            allowed = ", ".join(target.override_slots) or "none"
            raise ValueError(
                f"Interceptor {interceptor!r} has no override slot {slot!r} (allowed: {allowed})"
            )
        return target, slot
