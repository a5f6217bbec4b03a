"""
Constraint-based record validation.

A Constraint is a predicate over one value plus options. Constraints are held
in a ConstraintSet (ordered, mutable, keyed by name) so that plugins can add
or replace rules for a step before the Validator runs. Every constraint is
evaluated; failures are collected, not short-circuited.

Usage:
    constraints = ConstraintSet(
        status=build_constraint('choice', 4, choices=[1, 2, 3, 4, 5]),
        excerpt_blank=build_constraint('blank', '', message='excerpt_not_blank'),
    )
    ok, message = validate_record('save', record, constraints, registry)
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple, Type

from django.utils.translation import gettext as _

from .callbacks import CallbackRegistry, Phase
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# Message keys to localized text. Keys are what plugins pass as message=.
MESSAGES: Dict[str, str] = {
    'invalid_value': "Invalid value.",
    'should_be_blank': "Value should be blank.",
    'should_be_false': "Value should be false.",
    'should_be_true': "Value should be true.",
}


def localize(key: str) -> str:
    """Look up a constraint message key; unknown keys are shown verbatim."""
    return _(MESSAGES.get(key, key))


class Constraint:
    """Base constraint: always valid."""

    default_message = 'invalid_value'

    def __init__(self, value: Any = None, **options):
        self.value = value
        self.options = options

    @property
    def message(self) -> str:
        return self.options.get('message') or self.default_message

    def validate(self) -> bool:
        return True

    def __repr__(self):
        return f"{self.__class__.__name__}({self.value!r})"


class ChoiceConstraint(Constraint):
    """Value must be one of options['choices'] (compared as strings)."""

    def validate(self) -> bool:
        choices = self.options.get('choices') or []
        return str(self.value) in {str(choice) for choice in choices}


class BlankConstraint(Constraint):
    default_message = 'should_be_blank'

    def validate(self) -> bool:
        return self.value is None or str(self.value) == ''


class FalseConstraint(Constraint):
    default_message = 'should_be_false'

    def validate(self) -> bool:
        return not self.value or str(self.value) in ('0', 'false', 'False')


class TrueConstraint(Constraint):
    default_message = 'should_be_true'

    def validate(self) -> bool:
        return bool(self.value) and str(self.value) not in ('0', 'false', 'False')


CONSTRAINT_TYPES: Dict[str, Type[Constraint]] = {
    'choice': ChoiceConstraint,
    'blank': BlankConstraint,
    'false': FalseConstraint,
    'true': TrueConstraint,
}


def register_constraint(name: str, constraint_class: Type[Constraint]) -> None:
    """Make a constraint type available to build_constraint()."""
    CONSTRAINT_TYPES[name] = constraint_class


def build_constraint(kind: str, value: Any = None, **options) -> Constraint:
    """Construct a constraint by its registered name."""
    try:
        constraint_class = CONSTRAINT_TYPES[kind]
    except KeyError:
        raise ConfigurationError(f"Unknown constraint type '{kind}'")
    return constraint_class(value, **options)


class ConstraintSet(OrderedDict):
    """
    Named constraints for one validation run.

    This is the mutable context handed to 'validate_<step>' handlers: they
    may add, replace or delete entries. Nothing else is exposed to them.
    """

    def add(self, name: str, constraint: Constraint) -> None:
        self[name] = constraint


class Validator:
    """Run a set of constraints and collect the failures."""

    def __init__(self, constraints: Optional[ConstraintSet] = None):
        self.constraints = constraints if constraints is not None else ConstraintSet()
        self.failures: List[Tuple[str, Constraint]] = []

    def validate(self) -> bool:
        self.failures = []
        for name, constraint in self.constraints.items():
            if not isinstance(constraint, Constraint):
                raise ConfigurationError(
                    f"Constraint '{name}' is {type(constraint).__name__}, not a Constraint"
                )
            if not constraint.validate():
                self.failures.append((name, constraint))
        return not self.failures

    @property
    def messages(self) -> List[str]:
        return [localize(constraint.message) for _name, constraint in self.failures]


def validate_record(
    step: str,
    record: Dict[str, Any],
    constraints: ConstraintSet,
    registry: CallbackRegistry,
    event: str = 'article_ui',
) -> Tuple[bool, str]:
    """
    Let plugins adjust the constraints for step, then validate.

    Returns (True, '') or (False, joined_messages).
    """
    registry.dispatch_ref(event, f'validate_{step}', Phase.AFTER, record, constraints)

    validator = Validator(constraints)
    if validator.validate():
        return True, ''

    failed = [name for name, _constraint in validator.failures]
    logger.info("Validation failed for step %s: %s", step, ', '.join(failed))
    return False, ', '.join(validator.messages)
