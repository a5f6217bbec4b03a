"""
Declarative partial rendering.

Every region of a screen is registered with a render mode:

    STATIC          rendered for full pages only
    VOLATILE        producer output replaces the whole fragment at selector
    VOLATILE_VALUE  producer output replaces the value of the control at selector

A full page render returns the HTML of every region for the page template to
lay out. A refresh render returns a PatchScript: one instruction per volatile
region, in registration order, for the client-side applier.

Usage:
    regions = RegionRegistry()
    regions.add('title_value', RenderMode.VOLATILE_VALUE, '#title', title_value)
    result = PartialRenderer(regions, registry).render(view_state, refresh=True)
"""

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

from django.utils.html import escapejs

from .callbacks import CallbackRegistry, Phase
from .exceptions import ConfigurationError
from .metrics import observe_partial_render

logger = logging.getLogger(__name__)

Producer = Callable[[Dict[str, Any], str], str]


class RenderMode(Enum):
    STATIC = 'static'
    VOLATILE = 'volatile'
    VOLATILE_VALUE = 'volatile_value'

    @property
    def is_volatile(self) -> bool:
        return self is not RenderMode.STATIC


@dataclass
class Region:
    """One named region of the screen."""
    key: str
    mode: RenderMode
    selector: str
    producer: Producer
    html: Optional[str] = None

    def produce(self, view_state: Dict[str, Any]) -> str:
        self.html = self.producer(view_state, self.key)
        return self.html


class RegionRegistry:
    """
    Ordered regions for one request.

    This is the mutable context handed to 'partials_meta' handlers; they may
    add, replace or remove regions before any producer runs.
    """

    def __init__(self):
        self._regions: Dict[str, Region] = {}

    def add(self, key: str, mode: RenderMode, selector: str, producer: Producer) -> Region:
        region = Region(key=key, mode=mode, selector=selector, producer=producer)
        self._regions[key] = region
        return region

    def remove(self, key: str) -> None:
        self._regions.pop(key, None)

    def get(self, key: str) -> Optional[Region]:
        return self._regions.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._regions

    def __iter__(self) -> Iterator[Region]:
        return iter(list(self._regions.values()))

    def __len__(self) -> int:
        return len(self._regions)

    def volatile(self) -> List[Region]:
        return [region for region in self if region.mode.is_volatile]

    def html(self) -> Dict[str, str]:
        return {region.key: region.html or '' for region in self}


class PatchKind(Enum):
    REPLACE = 'replace'
    VALUE = 'value'


@dataclass
class PatchInstruction:
    selector: str
    kind: PatchKind
    payload: str

    def to_javascript(self) -> str:
        method = 'replaceWith' if self.kind is PatchKind.REPLACE else 'val'
        return f'$("{escapejs(self.selector)}").{method}("{self.payload}")'

    def to_dict(self) -> Dict[str, str]:
        return {'selector': self.selector, 'kind': self.kind.value, 'payload': self.payload}


@dataclass
class PatchScript:
    """Ordered DOM-patch instructions plus the message to announce."""
    instructions: List[PatchInstruction] = field(default_factory=list)
    message: str = ''
    level: str = 'success'

    def __len__(self):
        return len(self.instructions)

    def announce(self) -> str:
        payload = json.dumps({'message': self.message, 'level': self.level})
        return f'editor.announce({payload})'

    def render(self) -> str:
        lines = [self.announce()] + [i.to_javascript() for i in self.instructions]
        return ';\n' + ';\n'.join(lines) + ';\n'


class PartialRenderer:
    """Compute region output for a full page or a patch script."""

    def __init__(
        self,
        regions: RegionRegistry,
        registry: CallbackRegistry,
        event: str = 'article_ui',
    ):
        self.regions = regions
        self.registry = registry
        self.event = event

    def render(
        self,
        view_state: Dict[str, Any],
        refresh: bool = False,
        message: str = '',
        level: str = 'success',
    ):
        """
        Returns a PatchScript when refresh is set, else {key: html} for every
        region. Producer exceptions propagate.
        """
        mode = 'refresh' if refresh else 'initial'
        start = time.monotonic()

        self.registry.dispatch_ref(self.event, 'partials_meta', Phase.AFTER, view_state, self.regions)
        view_state['partials_meta'] = self.regions
        self._check_selectors()

        for region in self.regions.volatile():
            region.produce(view_state)

        if refresh:
            result = self._patch(message, level)
        else:
            for region in self.regions:
                if region.mode is RenderMode.STATIC:
                    region.produce(view_state)
            result = self.regions.html()

        observe_partial_render(mode, time.monotonic() - start)
        return result

    def _check_selectors(self) -> None:
        for region in self.regions.volatile():
            if not region.selector:
                logger.error("Empty selector for partial '%s'", region.key)
                raise ConfigurationError(f"Empty selector for partial '{region.key}'")

    def _patch(self, message: str, level: str) -> PatchScript:
        script = PatchScript(message=message, level=level)
        for region in self.regions.volatile():
            kind = PatchKind.REPLACE if region.mode is RenderMode.VOLATILE else PatchKind.VALUE
            script.instructions.append(
                PatchInstruction(region.selector, kind, escapejs(region.html or ''))
            )
        return script
