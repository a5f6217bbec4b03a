"""
Tests for constraint-based validation.
"""

import pytest

from apps.core.callbacks import Phase
from apps.core.exceptions import ConfigurationError
from apps.core.validators import (
    BlankConstraint,
    ChoiceConstraint,
    ConstraintSet,
    FalseConstraint,
    TrueConstraint,
    Validator,
    build_constraint,
    validate_record,
)


class TestBuiltInConstraints:

    def test_choice_compares_as_strings(self):
        assert ChoiceConstraint('4', choices=[1, 2, 3, 4, 5]).validate()
        assert ChoiceConstraint(4, choices=['4']).validate()
        assert not ChoiceConstraint(9, choices=[1, 2, 3]).validate()

    def test_blank(self):
        assert BlankConstraint('').validate()
        assert BlankConstraint(None).validate()
        assert not BlankConstraint('text').validate()

    def test_false(self):
        assert FalseConstraint(False).validate()
        assert FalseConstraint('0').validate()
        assert not FalseConstraint(True).validate()
        assert not FalseConstraint('1').validate()

    def test_true(self):
        assert TrueConstraint(True).validate()
        assert not TrueConstraint('0').validate()

    def test_message_override(self):
        constraint = BlankConstraint('x', message='excerpt_not_blank')
        assert constraint.message == 'excerpt_not_blank'

    def test_default_message(self):
        assert BlankConstraint('x').message == 'should_be_blank'


class TestBuildConstraint:

    def test_known_kind(self):
        constraint = build_constraint('choice', 2, choices=[1, 2])
        assert isinstance(constraint, ChoiceConstraint)
        assert constraint.validate()

    def test_unknown_kind_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            build_constraint('no_such_kind', 1)


class TestValidator:

    def test_all_constraints_run(self):
        constraints = ConstraintSet(
            first=BlankConstraint('x'),
            second=ChoiceConstraint(1, choices=[1]),
            third=FalseConstraint(True),
        )
        validator = Validator(constraints)

        assert validator.validate() is False
        assert [name for name, _c in validator.failures] == ['first', 'third']
        assert validator.messages == ['Value should be blank.', 'Value should be false.']

    def test_unknown_message_key_is_shown_verbatim(self):
        validator = Validator(ConstraintSet(x=BlankConstraint('x', message='Custom text')))
        validator.validate()
        assert validator.messages == ['Custom text']

    def test_non_constraint_entry_is_a_configuration_error(self):
        validator = Validator(ConstraintSet(bad='not a constraint'))
        with pytest.raises(ConfigurationError):
            validator.validate()


class TestValidateRecord:

    def test_success(self, registry):
        ok, message = validate_record('save', {}, ConstraintSet(a=BlankConstraint('')), registry)
        assert (ok, message) == (True, '')

    def test_failures_are_joined(self, registry):
        constraints = ConstraintSet(
            a=BlankConstraint('x'),
            b=TrueConstraint(False),
        )
        ok, message = validate_record('save', {}, constraints, registry)
        assert ok is False
        assert message == 'Value should be blank., Value should be true.'

    def test_plugins_adjust_constraints_for_the_step(self, registry):
        def require_title(event, step, record, constraints):
            constraints.add('title', TrueConstraint(record.get('title'), message='Title required.'))

        registry.register('article_ui', require_title, step='validate_publish', phase=Phase.AFTER)

        ok, message = validate_record('publish', {'title': ''}, ConstraintSet(), registry)
        assert (ok, message) == (False, 'Title required.')

        ok, message = validate_record('save', {'title': ''}, ConstraintSet(), registry)
        assert (ok, message) == (True, '')

    def test_plugins_can_remove_constraints(self, registry):
        registry.register(
            'article_ui',
            lambda event, step, record, constraints: constraints.pop('a'),
            step='validate_save',
        )

        ok, _message = validate_record('save', {}, ConstraintSet(a=BlankConstraint('x')), registry)
        assert ok is True
