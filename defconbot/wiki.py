# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator

import pywikibot
import requests
from pywikibot.exceptions import APIError

from .env import parse_oauth_credential

LOGGER = logging.getLogger(__name__)
API_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class FetchError(RuntimeError):
    """A read from the wiki failed."""


class MissingFieldError(FetchError):
    """The wiki answered, but without the fields we need."""


class SubmitError(RuntimeError):
    """The wiki rejected an edit."""


class EditConflictError(SubmitError):
    """The page changed since its base revision was read."""


@dataclass(frozen=True)
class PageRevision:
    title: str
    revision_id: int
    content: str


def _api_timestamp(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(API_TIMESTAMP_FORMAT)


def connect_site(lang: str, family: str = "wikipedia", oauth_credential: str | None = None) -> pywikibot.Site:
    site = pywikibot.Site(lang, family)
    if oauth_credential:
        pywikibot.config.authenticate[site.hostname()] = parse_oauth_credential(oauth_credential)
    site.login()
    return site


class WikiClient:
    """Thin MediaWiki API client over a logged-in pywikibot site."""

    def __init__(self, site: Any) -> None:
        self.site = site

    @classmethod
    def connect(cls, lang: str, family: str, oauth_credential: str | None) -> "WikiClient":
        return cls(connect_site(lang, family, oauth_credential))

    def _query(self, **params: Any) -> dict[str, Any]:
        try:
            data = self.site.simple_request(**params).submit()
        except (pywikibot.exceptions.Error, requests.RequestException) as exc:
            raise FetchError(f"API request failed ({params.get('action')}): {exc}") from exc
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected API response type: {type(data).__name__}")
        return data

    def fetch_recent_edit_comments(self, start: datetime, end: datetime) -> Iterator[list[dict[str, str]]]:
        """
        Yield one list of `{"comment": ...}` records per API result page.

        The API lists newest first, so `rcstart` is the window end. Pages are
        fetched lazily and the continuation is followed until exhausted.
        """
        params: dict[str, Any] = {
            "action": "query",
            "list": "recentchanges",
            "rctype": "edit",
            "rcstart": _api_timestamp(end),
            "rcend": _api_timestamp(start),
            "rcprop": "comment",
            "rclimit": "max",
            "formatversion": 2,
        }
        continuation: dict[str, Any] = {}
        page_number = 0
        while True:
            data = self._query(**params, **continuation)
            try:
                changes = data["query"]["recentchanges"]
            except (KeyError, TypeError) as exc:
                raise MissingFieldError("recentchanges missing from API response") from exc
            page_number += 1
            LOGGER.debug("Fetched recent changes page %d (%d edits)", page_number, len(changes))
            # hidden comments come back without a "comment" key
            yield [{"comment": str(change.get("comment") or "")} for change in changes]

            continuation = data.get("continue") or {}
            if not continuation:
                return

    def fetch_page_revision(self, title: str) -> PageRevision:
        data = self._query(
            action="query",
            prop="revisions",
            titles=title,
            rvprop="ids|content",
            rvslots="main",
            rvlimit=1,
            formatversion=2,
        )
        try:
            page = data["query"]["pages"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise MissingFieldError(f"No page in API response for {title!r}") from exc
        if page.get("missing") or page.get("invalid"):
            raise MissingFieldError(f"Page {title!r} does not exist")
        try:
            revision = page["revisions"][0]
            revision_id = int(revision["revid"])
            content = revision["slots"]["main"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise MissingFieldError(f"No readable latest revision for {title!r}") from exc
        if not isinstance(content, str):
            raise MissingFieldError(f"Main slot of {title!r} has no text content")
        return PageRevision(title=title, revision_id=revision_id, content=content)

    def fetch_edit_token(self) -> str:
        try:
            return str(self.site.tokens["csrf"])
        except (pywikibot.exceptions.Error, requests.RequestException, KeyError) as exc:
            raise FetchError(f"Unable to fetch a CSRF token: {exc}") from exc

    def submit_edit(self, title: str, summary: str, text: str, base_revision_id: int, token: str) -> int | None:
        """Save `text` to `title` unless it changed after `base_revision_id`; returns the new revision id."""
        try:
            data = self.site.simple_request(
                action="edit",
                title=title,
                summary=summary,
                text=text,
                baserevid=str(base_revision_id),
                nocreate=1,
                bot=1,
                token=token,
                formatversion=2,
            ).submit()
        except APIError as exc:
            if exc.code == "editconflict":
                raise EditConflictError(f"{title!r} changed after revision {base_revision_id}") from exc
            raise SubmitError(f"Edit to {title!r} rejected: {exc.code}: {exc.info}") from exc
        except (pywikibot.exceptions.Error, requests.RequestException) as exc:
            raise SubmitError(f"Edit to {title!r} failed: {exc}") from exc

        result = data.get("edit") if isinstance(data, dict) else None
        if not isinstance(result, dict) or result.get("result") != "Success":
            raise SubmitError(f"Edit to {title!r} not saved: {result!r}")
        new_revid = result.get("newrevid")
        return int(new_revid) if new_revid is not None else None
