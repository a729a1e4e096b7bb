"""Time helpers and JSON document I/O for the league store."""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('fsl.utils')


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix naive and aware."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def load_json(path: Path | str, schema: type[T] | None = None) -> Any | T:
    """
    Read a JSON document, validating it against a pydantic model if given.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the document is malformed
        ValueError: If the document doesn't match ``schema``

    Example:
        from fsl.schemas import LeagueDatabase
        db = load_json('data/league.json', schema=LeagueDatabase)
    """
    path = Path(path)
    if not path.exists():
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    with open(path, encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
            raise

    if schema is None:
        return data

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'{path} does not match {schema.__name__}: {e.error_count()} error(s)')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def save_json(path: Path | str, data: Any, indent: int = 2) -> None:
    """
    Write ``data`` (plain JSON data or a pydantic model) to ``path``.

    The document goes to a temporary file in the same directory which then
    replaces the target, so readers see either the old or the new version.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = data.model_dump(mode='json') if isinstance(data, BaseModel) else data

    fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_name, path)
    except (TypeError, OSError) as e:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        logger.error(f'Failed to write {path}: {e}')
        raise

    logger.debug(f'Saved {path}')
