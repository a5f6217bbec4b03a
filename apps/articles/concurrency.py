"""
Optimistic concurrency for article saves.

The edit form carries sLastMod, the fingerprint (microseconds since the
epoch of last_modified) of the row it was rendered from. A save is allowed
only while that still matches the stored row, and the write itself is a
conditional UPDATE on the stored last_modified, so two saves racing past
the check still cannot both land.

No locks are held between requests.

Usage:
    result = check_and_lock(article_id, request.POST.get('sLastMod'), user)
    if isinstance(result, Conflict):
        ...
    stamp_update(article_id, result.snapshot.fingerprint, fields, user)

Both writes raise PersistenceError when the database refuses them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
)
from apps.core.metrics import increment_conflicts
from apps.core.permissions import has_privs

from .models import Article, ArticleStatus, fingerprint_of, from_fingerprint

logger = logging.getLogger(__name__)


@dataclass
class StoredSnapshot:
    """The stored fields a save decision depends on."""
    id: int
    status: int
    title: str
    url_title: str
    author_id: Optional[int]
    last_modified: datetime
    last_modified_by: str
    posted: datetime
    expires: Optional[datetime]

    @property
    def fingerprint(self) -> int:
        return fingerprint_of(self.last_modified)

    @property
    def is_public(self) -> bool:
        return ArticleStatus.is_public_value(self.status)


@dataclass
class Allowed:
    snapshot: StoredSnapshot


@dataclass
class Conflict:
    snapshot: StoredSnapshot

    @property
    def modified_by(self) -> str:
        return self.snapshot.last_modified_by


GuardResult = Union[Allowed, Conflict]


def can_edit(user, stored_status, author_id) -> bool:
    """Privilege gate, evaluated against the stored status."""
    is_author = author_id is not None and user is not None and author_id == user.pk
    if ArticleStatus.is_public_value(stored_status):
        return has_privs(user, 'article.edit.published') or (
            is_author and has_privs(user, 'article.edit.own.published')
        )
    return has_privs(user, 'article.edit') or (
        is_author and has_privs(user, 'article.edit.own')
    )


def fetch_snapshot(article_id) -> StoredSnapshot:
    row = (
        Article.objects.filter(pk=article_id)
        .values(
            'pk', 'status', 'title', 'url_title', 'author_id',
            'last_modified', 'last_modified_by__username', 'posted', 'expires',
        )
        .first()
    )
    if row is None:
        raise NotFoundError(f"Article {article_id} not found", field='ID')
    return StoredSnapshot(
        id=row['pk'],
        status=row['status'],
        title=row['title'],
        url_title=row['url_title'],
        author_id=row['author_id'],
        last_modified=row['last_modified'],
        last_modified_by=row['last_modified_by__username'] or '',
        posted=row['posted'],
        expires=row['expires'],
    )


def parse_fingerprint(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def check_and_lock(article_id, client_fingerprint, user) -> GuardResult:
    """
    Compare the client's fingerprint with the stored row.

    Raises NotFoundError for a missing row and AuthorizationError when the
    user may not edit the article in its stored status.
    """
    snapshot = fetch_snapshot(article_id)

    if not can_edit(user, snapshot.status, snapshot.author_id):
        logger.warning(
            "Edit of article %s denied for user %s (stored status %s)",
            article_id, getattr(user, 'pk', None), snapshot.status,
        )
        raise AuthorizationError("You are not allowed to edit this article", field='ID')

    if parse_fingerprint(client_fingerprint) != snapshot.fingerprint:
        increment_conflicts()
        logger.info(
            "Concurrent edit of article %s: client %s, stored %s by %s",
            article_id, client_fingerprint, snapshot.fingerprint, snapshot.last_modified_by,
        )
        return Conflict(snapshot)

    return Allowed(snapshot)


def next_stamp(previous: Optional[datetime], now: Optional[datetime] = None) -> datetime:
    """Server now, forced strictly after previous."""
    now = now or timezone.now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def stamp_update(article_id, expected_fingerprint: int, fields: Dict[str, Any], user) -> datetime:
    """
    Write fields and a fresh last_modified in one conditional UPDATE.

    Returns the new last_modified. Raises ConflictError when the stored
    fingerprint moved since it was read, PersistenceError when the write
    itself fails.
    """
    expected = from_fingerprint(expected_fingerprint)
    stamp = next_stamp(expected)

    try:
        with transaction.atomic():
            updated = Article.objects.filter(pk=article_id, last_modified=expected).update(
                last_modified=stamp,
                last_modified_by=user,
                **fields,
            )
    except DatabaseError as exc:
        logger.exception("Article %s update failed", article_id)
        raise PersistenceError(f"Article {article_id} update failed") from exc

    if updated == 0:
        current = fetch_snapshot(article_id)
        increment_conflicts()
        logger.info(
            "Conditional update of article %s lost to %s",
            article_id, current.last_modified_by,
        )
        raise ConflictError(
            f"Article {article_id} was modified by {current.last_modified_by}",
            modified_by=current.last_modified_by,
        )

    return stamp


def insert_article(**fields) -> Article:
    """Insert a new article row; a refused write becomes PersistenceError."""
    try:
        with transaction.atomic():
            return Article.objects.create(**fields)
    except DatabaseError as exc:
        logger.exception("Article insert failed")
        raise PersistenceError("Article insert failed") from exc
