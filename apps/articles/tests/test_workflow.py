"""
Tests for Write panel step resolution and form field names.
"""

import pytest

from apps.articles.workflow import (
    STEP_TOKENS,
    EditorStep,
    active_custom_fields,
    form_fields,
    resolve_step,
)


class TestSteps:

    @pytest.mark.parametrize('data, expected', [
        ({}, 'create'),
        ({'step': 'edit'}, 'edit'),
        ({'step': 'edit', 'save': 'Save'}, 'save'),
        ({'step': 'create', 'publish': 'Publish'}, 'publish'),
        ({'step': 'save_pane_state'}, 'save_pane_state'),
    ])
    def test_resolve_step(self, data, expected):
        assert resolve_step(data) == expected

    def test_every_step_has_a_token_rule(self):
        assert set(STEP_TOKENS) == {step.value for step in EditorStep}

    def test_mutations_need_the_token(self):
        for step in EditorStep:
            assert STEP_TOKENS[step.value] is step.is_mutation

    def test_unknown_step(self):
        with pytest.raises(ValueError):
            EditorStep.from_string('explode')


class TestFormFields:

    def test_custom_fields_follow_settings(self, settings):
        settings.ARTICLE_CUSTOM_FIELDS = {3: 'Mood', 1: 'Source', 2: ''}

        assert active_custom_fields() == {1: 'Source', 3: 'Mood'}
        assert form_fields()[-2:] == ['custom_1', 'custom_3']

    def test_date_fields_present(self):
        fields = form_fields()
        assert 'year' in fields
        assert 'exp_second' in fields
        assert 'sLastMod' in fields
