from __future__ import annotations

import logging
from operator import attrgetter
from typing import Any, Callable, Dict, List, Optional, Sequence, Union, cast

from tunesbridge.crosscutting.logging import CorrelationContext
from tunesbridge.domain.entities import Playlist, Track
from tunesbridge.domain.errors import ColumnMismatchError, UnknownFieldError
from tunesbridge.domain.ports import BulkColumnBackend
from tunesbridge.domain.vocabulary import ElementKind, Prop

logger = logging.getLogger(__name__)

Row = List[Any]

# Track fields a bulk query may ask for, and how to read each from one Track.
TRACK_FIELD_ACCESSORS: Dict[Prop, Callable[[Track], Any]] = {
    prop: attrgetter(prop.value)
    for prop in (
        Prop.NAME,
        Prop.INDEX,
        Prop.ARTIST,
        Prop.ALBUM,
        Prop.RATING,
        Prop.ENABLED,
        Prop.YEAR,
        Prop.GENRE,
        Prop.LYRICS,
        Prop.COMPOSER,
        Prop.TIME,
        Prop.TRACK_NUMBER,
        Prop.DATABASE_ID,
        Prop.PLAYED_COUNT,
        Prop.PLAYED_DATE,
        Prop.SKIPPED_COUNT,
        Prop.SKIPPED_DATE,
        Prop.URL,
    )
}


def resolve_field(name: Union[Prop, str]) -> Prop:
    """Map a field name to its canonical ``Prop``, rejecting anything that is not a track field."""
    try:
        prop = Prop(name)
    except ValueError:
        raise UnknownFieldError(str(name)) from None
    if prop not in TRACK_FIELD_ACCESSORS:
        raise UnknownFieldError(prop.value)
    return prop


def query_fields(playlist: Playlist, field_names: Sequence[Union[Prop, str]]) -> Optional[List[Row]]:
    """Read several fields of every track in a playlist.

    Returns one row per track, in playlist order, each row holding the field
    values in the order requested. Backends that can read a whole column in one
    query are read column by column; the rest track by track. Both give the
    same rows.

    Returns None when no field is requested.
    """
    if not field_names:
        return None
    fields = [resolve_field(name) for name in field_names]

    backend = playlist.ref.backend
    with CorrelationContext(backend=backend.tag.value, operation='query_fields'):
        if backend.supports_bulk_columns:
            logger.debug(f"Column query for {len(fields)} field(s)")
            return _query_columns(playlist, fields)
        logger.debug(f"Row-by-row query for {len(fields)} field(s)")
        return _query_rows(playlist, fields)


def _query_columns(playlist: Playlist, fields: List[Prop]) -> List[Row]:
    backend = cast(BulkColumnBackend, playlist.ref.backend)
    handle = playlist.ref.handle
    if backend.count_elements(handle, ElementKind.TRACKS) == 0:
        return []

    columns = [backend.column(handle, prop) for prop in fields]
    lengths = {len(column) for column in columns}
    if len(lengths) > 1:
        raise ColumnMismatchError(
            "Columns of different lengths returned: "
            + ', '.join(f"{prop.value}={len(column)}" for prop, column in zip(fields, columns))
        )
    return [list(row) for row in zip(*columns)]


def _query_rows(playlist: Playlist, fields: List[Prop]) -> List[Row]:
    accessors = [TRACK_FIELD_ACCESSORS[prop] for prop in fields]
    return [[accessor(track) for accessor in accessors] for track in playlist.tracks]
