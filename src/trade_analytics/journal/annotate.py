"""Journal annotation: attach emotion / setup / grade / notes to a trade.

Trades are immutable.  ``update_trade_journal`` returns a new list in
which only the matching trade is replaced; the merged journal is

    defaults  <-  existing journal  <-  patch

so a partial patch on an un-journaled trade still yields a complete
journal (neutral / other / C / "" / "").
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from ..core.errors import JournalPatchError
from ..core.models import Trade, TradeJournal

logger = logging.getLogger(__name__)


def _journal_keys() -> dict[str, str]:
    """Accepted patch keys (field names and camelCase aliases) -> field name."""
    keys: dict[str, str] = {}
    for name, info in TradeJournal.model_fields.items():
        keys[name] = name
        if info.alias:
            keys[info.alias] = name
    return keys


_PATCH_KEYS = _journal_keys()


def normalise_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Map patch keys to journal field names.

    Raises
    ------
    JournalPatchError
        If a key is not a journal field.
    """
    unknown = sorted(k for k in patch if k not in _PATCH_KEYS)
    if unknown:
        raise JournalPatchError(f"Unknown journal fields: {', '.join(unknown)}")
    return {_PATCH_KEYS[k]: v for k, v in patch.items()}


def merge_journal(
    existing: TradeJournal | None,
    patch: Mapping[str, Any],
) -> TradeJournal:
    """Defaults, then the existing journal, then the patch."""
    data = TradeJournal().model_dump()
    if existing is not None:
        data.update(existing.model_dump())
    data.update(normalise_patch(patch))
    try:
        return TradeJournal.model_validate(data)
    except ValidationError as exc:
        raise JournalPatchError(str(exc)) from exc


def update_trade_journal(
    trades: Sequence[Trade],
    trade_id: str,
    patch: Mapping[str, Any],
) -> list[Trade]:
    """Return ``trades`` with the journal of ``trade_id`` patched.

    Other trades are passed through as the same objects.  An unknown id
    leaves the list unchanged.
    """
    updated: list[Trade] = []
    found = False
    for trade in trades:
        if trade.id != trade_id:
            updated.append(trade)
            continue
        found = True
        journal = merge_journal(trade.journal, patch)
        updated.append(trade.model_copy(update={"journal": journal}))

    if not found:
        logger.debug("Journal update for unknown trade %s ignored", trade_id)
    return updated
