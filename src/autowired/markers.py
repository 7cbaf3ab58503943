from __future__ import annotations

import re
from typing import TYPE_CHECKING, Annotated, Any, TypeVar, Union, get_args, get_origin

T = TypeVar("T")
_ANNOTATED_MARKER_MIN_ARGS = 2
_AUTOWIRED_DOC_PATTERN = re.compile(r"@autowired\b", re.IGNORECASE)
_TYPE_HINT_DOC_PATTERN = re.compile(r"\btype:\s*([A-Za-z_][\w.]*)")
_AUTOWIRED_ANNOTATION_PATTERN = re.compile(
    r"^\s*(?:[A-Za-z_][\w.]*\.)?Autowired\[(?P<target>.+)\]\s*$",
    re.DOTALL,
)


class AutowiredMarker:
    """A marker used to indicate an attribute should be filled by the attribute injector.

    Instances are attached to ``typing.Annotated`` metadata; ``Autowired[T]``
    builds that annotation for you.
    """

    def __repr__(self) -> str:
        return "AutowiredMarker()"


class AutowiredField:
    """Class-level placeholder for an attribute that receives an autowired dependency.

    Create it with ``autowired()``. Until the injector writes a value into the
    instance, reading the attribute raises ``AttributeError`` just like an
    unset annotated attribute would.
    """

    __slots__ = ("doc", "name", "owner")

    def __init__(self, doc: str | None = None) -> None:
        self.doc = doc
        self.name: str | None = None
        self.owner: type[Any] | None = None

    def __set_name__(self, owner: type[Any], name: str) -> None:
        self.owner = owner
        self.name = name

    def __get__(self, instance: object, owner: type[Any] | None = None) -> Any:
        if instance is None:
            return self
        msg = f"'{type(instance).__qualname__}' attribute '{self.name}' has not been autowired"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        if self.doc is None:
            return "autowired()"
        return f"autowired(doc={self.doc!r})"


def autowired(doc: str | None = None) -> Any:
    """Mark a class attribute for attribute injection.

    The attribute type comes from its annotation when that names a class;
    otherwise it is parsed from ``doc`` written as ``"type: ClassName"``.

    Examples:
        .. code-block:: python

            class Mailer:
                transport: SmtpTransport = autowired()
                renderer = autowired(doc="type: TemplateRenderer")

    Args:
        doc: Optional documentation text; may carry a ``type: <TypeName>`` hint.

    """
    return AutowiredField(doc)


if TYPE_CHECKING:
    Autowired = Union[T, T]  # noqa: UP007,PYI016
    """Mark an annotated attribute for attribute injection.

    At runtime ``Autowired[T]`` becomes ``Annotated[T, AutowiredMarker()]``.

    Examples:
        .. code-block:: python

            class ReportService:
                repository: Autowired[ReportRepository]
    """

else:

    class Autowired:
        """Mark an annotated attribute for attribute injection.

        At runtime ``Autowired[T]`` resolves to ``Annotated[T, AutowiredMarker()]``.

        Examples:
            .. code-block:: python

                class ReportService:
                    repository: Autowired[ReportRepository]

        """

        def __class_getitem__(cls, item: T) -> Annotated[T, AutowiredMarker]:
            if get_origin(item) is Annotated:
                args = get_args(item)
                return _build_annotated((args[0], *args[1:], AutowiredMarker()))
            return _build_annotated((item, AutowiredMarker()))


def annotation_metadata(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``(T, metadata)``; other annotations get no metadata."""
    if get_origin(annotation) is not Annotated:
        return annotation, ()
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return annotation, ()  # pragma: no cover - Annotated requires at least 2 args
    return annotation_args[0], tuple(annotation_args[1:])


def has_autowired_marker(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., AutowiredMarker()]."""
    _inner, metadata = annotation_metadata(annotation)
    return any(isinstance(item, AutowiredMarker) for item in metadata)


def documentation_strings(metadata: tuple[Any, ...]) -> tuple[str, ...]:
    """Collect documentation text from ``Annotated`` metadata.

    Plain strings count as documentation, as do objects exposing a
    ``documentation`` string attribute (``typing_extensions.Doc``).
    """
    docs: list[str] = []
    for item in metadata:
        if isinstance(item, str):
            docs.append(item)
            continue
        documentation = getattr(item, "documentation", None)
        if isinstance(documentation, str):
            docs.append(documentation)
    return tuple(docs)


def is_autowired_doc(doc: str) -> bool:
    """Return True when documentation carries the ``@autowired`` tag (any case)."""
    return _AUTOWIRED_DOC_PATTERN.search(doc) is not None


def parse_type_hint(doc: str) -> str | None:
    """Return ``TypeName`` from a ``type: TypeName`` documentation hint, if present."""
    match = _TYPE_HINT_DOC_PATTERN.search(doc)
    if match is None:
        return None
    return match.group(1)


def autowired_annotation_target(annotation: str) -> str | None:
    """Return the target of an unevaluated ``"Autowired[Target]"`` annotation string.

    Used when the annotation cannot be evaluated, for example when it names a
    class local to a function body. Returns ``None`` for any other string.
    """
    match = _AUTOWIRED_ANNOTATION_PATTERN.match(annotation)
    if match is None:
        return None
    return match.group("target").strip()


def _build_annotated(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]


__all__ = [
    "Autowired",
    "AutowiredField",
    "AutowiredMarker",
    "annotation_metadata",
    "autowired",
    "autowired_annotation_target",
    "documentation_strings",
    "has_autowired_marker",
    "is_autowired_doc",
    "parse_type_hint",
]
