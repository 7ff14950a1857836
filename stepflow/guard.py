"""
Fault Boundary
This module turns faults raised by step logic into ordinary error results,
so a misbehaving step is observed as "this step produced error E" and never
escapes into the orchestrating process.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Iterable, NoReturn, Optional, Type
import logging

from .exceptions import ConfigurationError, FaultError, Panic

logger = logging.getLogger(__name__)

# Maps a fault payload to an error, or None when the payload is not recognized.
Extractor = Callable[[Any], Optional[BaseException]]


def panic(payload: Any) -> NoReturn:
    """Aborts the current step with `payload`, which may be any object."""
    raise Panic(payload)


def extract_type(
    *types: Type[Any],
    factory: Callable[[Any], BaseException] | None = None,
) -> Extractor:
    """
    Builds an extractor that recognizes payloads by type.

    Matching payloads are passed to `factory` when one is given; otherwise an
    exception payload is returned as-is and any other payload is wrapped in a
    `FaultError`.
    """
    if not types:
        raise ConfigurationError("extract_type() requires at least one type")

    def _extract(payload: Any) -> Optional[BaseException]:
        if not isinstance(payload, types):
            return None
        if factory is not None:
            return factory(payload)
        if isinstance(payload, BaseException):
            return payload
        return FaultError(payload)

    _extract.__qualname__ = "extract_type(%s)" % ", ".join(t.__name__ for t in types)
    return _extract


class PanicGuard:
    """
    Runs step logic and converts any fault it raises into an error result.

    Extractors are tried in order against the fault payload; the first one to
    return an error decides the outcome. When none matches, the payload's
    string form becomes a `FaultError`. Only `Exception` subclasses count as
    faults: interpreter exits, keyboard interrupts and task cancellation
    propagate untouched. Interception covers the caller's own call stack
    only, not work the step hands off to other threads.
    """

    def __init__(
        self,
        extractors: Iterable[Extractor] = (),
        *,
        log_level: int = logging.DEBUG,
    ):
        self.extractors: tuple[Extractor, ...] = tuple(extractors)
        for extract in self.extractors:
            if not callable(extract):
                raise ConfigurationError(f"Fault extractor is not callable: {extract!r}")
        self.log_level = log_level

    def run(self, func: Callable[[], Any]) -> Any:
        """Calls `func` and returns its result, or the error its fault converts to."""
        try:
            return func()
        except Exception as exc:
            return self._convert(func, exc)

    async def arun(self, func: Callable[[], Awaitable[Any]]) -> Any:
        """Coroutine counterpart of `run`, awaited on the caller's event loop."""
        try:
            return await func()
        except Exception as exc:
            return self._convert(func, exc)

    def _convert(self, func: Callable[..., Any], exc: Exception) -> BaseException:
        logger.log(
            self.log_level,
            "Intercepted fault in %s: %r",
            getattr(func, "__qualname__", func),
            exc,
            exc_info=exc,
        )
        payload = exc.payload if isinstance(exc, Panic) else exc
        for extract in self.extractors:
            try:
                converted = extract(payload)
            except Exception:
                logger.warning(
                    "Fault extractor %s failed, treating it as not matching",
                    getattr(extract, "__qualname__", extract),
                    exc_info=True,
                )
                continue
            if converted is None:
                continue
            if not isinstance(converted, BaseException):
                logger.warning(
                    "Fault extractor %s returned %r instead of an error, "
                    "treating it as not matching",
                    getattr(extract, "__qualname__", extract),
                    converted,
                )
                continue
            return converted
        fault = FaultError(payload)
        fault.__cause__ = exc
        return fault


def catch_panic_as_error(func: Callable[[], Any], *extractors: Extractor) -> Any:
    """Runs `func` once under a `PanicGuard` built from `extractors`."""
    return PanicGuard(extractors).run(func)
