from __future__ import annotations

from dataclasses import dataclass

from autowired.exceptions import AutowiredResolutionDepthError


@dataclass(frozen=True, slots=True)
class ResolutionTrace:
    """Chain of type identifiers from the top-level request to the current resolution.

    Each nested resolution gets its own extended copy, so sibling parameters
    and members never see each other's path.
    """

    path: tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.path)

    def enter(self, identifier: str, *, max_depth: int) -> ResolutionTrace:
        """Return the trace extended with ``identifier``.

        Raises:
            AutowiredResolutionDepthError: When the extended path is longer than ``max_depth``.

        """
        path = (*self.path, identifier)
        if len(path) > max_depth:
            raise AutowiredResolutionDepthError(path, max_depth)
        return ResolutionTrace(path)


__all__ = ["ResolutionTrace"]
