"""
Callback registry for editor extension points.

Plugins register handlers against an (event, step, phase) triple. The editor
fires events in two styles:

- dispatch():     additive hooks; string returns are concatenated.
- dispatch_ref(): handlers receive mutable context objects (a ConstraintSet
                  or a RegionRegistry) and edit them in place; return values
                  are collected in a list.

pluggable_ui() wraps dispatch() so a plugin can replace one fragment of the
editor markup without forking the renderer.

The process-wide registry is filled once, from settings.EDITOR_PLUGINS, when
the core app becomes ready. Registration while requests are served is not
supported.

Usage:
    def register(registry):
        registry.register('article_posted', notify_editors)
        registry.register('article_ui', custom_title, step='title', phase=Phase.BEFORE)
"""

import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Two slots for the same (event, step)."""
    BEFORE = 'before'
    AFTER = 'after'


@dataclass
class Registration:
    """One registered handler."""
    handler: Any
    event: str
    step: str = ''
    phase: Phase = Phase.AFTER

    def matches(self, event: str, step: str, phase: Phase) -> bool:
        return (
            self.event == event
            and self.phase == phase
            and (not self.step or self.step == step)
        )

    @property
    def name(self) -> str:
        return getattr(self.handler, '__qualname__', None) or repr(self.handler)


class CallbackRegistry:
    """Ordered table of callback registrations."""

    def __init__(self):
        self._registrations: List[Registration] = []

    def __len__(self):
        return len(self._registrations)

    def register(
        self,
        event: str,
        handler: Callable,
        step: str = '',
        phase: Phase = Phase.AFTER,
    ) -> None:
        """Append a handler. Duplicates are kept."""
        self._registrations.append(
            Registration(handler=handler, event=event, step=step or '', phase=phase)
        )

    def handlers_for(self, event: str, step: str = '', phase: Phase = Phase.AFTER) -> List[Registration]:
        """Registrations matching the triple, in registration order."""
        return [r for r in self._registrations if r.matches(event, step, phase)]

    def dispatch(self, event: str, step: str = '', phase: Phase = Phase.AFTER, *args) -> str:
        """
        Call every matching handler as handler(event, step, *args).

        Returns the concatenation of the handlers' string results.
        """
        output = []
        for registration in self._callable_handlers(event, step, phase):
            result = registration.handler(event, step, *args)
            if result is not None:
                output.append(str(result))
        return ''.join(output)

    def dispatch_ref(
        self,
        event: str,
        step: str = '',
        phase: Phase = Phase.AFTER,
        data: Any = None,
        options: Any = None,
    ) -> List[Any]:
        """
        Call every matching handler as handler(event, step, data, options).

        data and options are passed as-is so handlers can mutate them.
        """
        return [
            registration.handler(event, step, data, options)
            for registration in self._callable_handlers(event, step, phase)
        ]

    def pluggable_ui(self, event: str, element: str, default: str = '', *context) -> str:
        """Return plugin-provided markup for element, or default when none."""
        ui = self.dispatch(event, element, Phase.BEFORE, default, *context)
        return default if ui == '' else ui

    def _callable_handlers(self, event: str, step: str, phase: Phase) -> Iterable[Registration]:
        for registration in self.handlers_for(event, step, phase):
            if callable(registration.handler):
                yield registration
            elif getattr(settings, 'PRODUCTION_STATUS', 'live') != 'live':
                message = f"Unknown callback function '{registration.name}' for event '{event}'"
                logger.warning(message)
                warnings.warn(message, RuntimeWarning, stacklevel=3)


_registry: Optional[CallbackRegistry] = None


def get_registry() -> CallbackRegistry:
    """Get or create the process-wide registry."""
    global _registry
    if _registry is None:
        _registry = CallbackRegistry()
    return _registry


def load_plugins(paths: Iterable[str], registry: Optional[CallbackRegistry] = None) -> CallbackRegistry:
    """
    Import each dotted path and call it with the registry.

    A path that fails to import is a deployment error and propagates.
    """
    registry = registry if registry is not None else get_registry()
    for path in paths:
        register = import_string(path)
        register(registry)
        logger.info("Loaded editor plugin %s", path)
    return registry
