"""
Write panel view.

GET  /write/?step=edit&ID=<id>      edit screen
POST /write/ (publish|save buttons)  publish or save, then the edit screen
POST /write/ step=save_pane_state   XML status envelope

Steps that change data need the form token; a missing or stale token ends
the request with 403 before anything is written.
"""

import logging

from django.views import View

from apps.core.permissions import PrivilegeRequiredMixin
from apps.core.security import bouncer

from .services import ArticleEditor
from .workflow import STEP_TOKENS, EditorStep, resolve_step

logger = logging.getLogger(__name__)


class ArticleEditorView(PrivilegeRequiredMixin, View):
    """The Write panel. Needs the 'article' privilege."""

    required_privilege = 'article'
    http_method_names = ['get', 'post']

    def get(self, request):
        return self.handle(request)

    def post(self, request):
        return self.handle(request)

    def handle(self, request):
        data = request.GET.dict()
        data.update(request.POST.dict())

        step = bouncer(resolve_step(data), STEP_TOKENS, request)
        if not step:
            step = EditorStep.CREATE.value

        logger.debug("Write panel step %s for user %s", step, request.user.pk)
        return ArticleEditor(request).dispatch(step)
