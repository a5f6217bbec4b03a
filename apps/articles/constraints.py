"""
Article-specific constraints, registered with the core validator under
'section', 'category', 'form' and 'textfilter'.
"""

from apps.core.textfilters import get_textfilter
from apps.core.validators import MESSAGES, Constraint, register_constraint

from .models import ArticleForm, Category, Section

MESSAGES.update({
    'unknown_section': "Section does not exist.",
    'unknown_category': "Category does not exist.",
    'unknown_form': "Override form does not exist.",
    'unknown_textfilter': "Text filter does not exist.",
    'invalid_status': "Invalid article status.",
    'invalid_textfilter_body': "Invalid text filter for the body.",
    'invalid_textfilter_excerpt': "Invalid text filter for the excerpt.",
    'excerpt_not_blank': "Excerpts are disabled, but an excerpt was given.",
    'invite_not_blank': "Comments are disabled, but a comment invitation was given.",
    'comments_are_on': "Comments are disabled, but comments were switched on.",
    'override_form_not_blank': "Form overrides are disabled, but an override form was given.",
})


class SectionConstraint(Constraint):
    """Value names an existing section."""
    default_message = 'unknown_section'

    def validate(self):
        return Section.objects.filter(name=self.value or '').exists()


class CategoryConstraint(Constraint):
    """Blank, or names an existing category of options['type']."""
    default_message = 'unknown_category'

    def validate(self):
        if not self.value:
            return True
        qs = Category.objects.filter(name=self.value)
        if self.options.get('type'):
            qs = qs.filter(type=self.options['type'])
        return qs.exists()


class FormConstraint(Constraint):
    """Blank, or names an existing form of options['type']."""
    default_message = 'unknown_form'

    def validate(self):
        if not self.value:
            return True
        qs = ArticleForm.objects.filter(name=self.value)
        if self.options.get('type'):
            qs = qs.filter(type=self.options['type'])
        return qs.exists()


class TextfilterConstraint(Constraint):
    default_message = 'unknown_textfilter'

    def validate(self):
        return self.value is not None and get_textfilter(self.value) is not None


register_constraint('section', SectionConstraint)
register_constraint('category', CategoryConstraint)
register_constraint('form', FormConstraint)
register_constraint('textfilter', TextfilterConstraint)
