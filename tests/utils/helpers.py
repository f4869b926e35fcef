"""Test helper functions."""

from unittest.mock import AsyncMock, MagicMock

QUERY_METHODS = ("select", "eq", "in_", "is_", "order", "limit", "insert", "update", "delete", "single")


def create_query_mock(data=None, error: Exception = None) -> MagicMock:
    """Chainable postgrest query whose ``execute()`` returns ``data`` or raises ``error``."""
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data if data is not None else [])
    return query


def create_client_mock(tables: dict = None) -> MagicMock:
    """Supabase client whose ``table(name)`` returns the matching query mock."""
    if tables is None:
        tables = {}
    client = MagicMock()
    client.table.side_effect = lambda name: tables.setdefault(name, create_query_mock())
    return client


def recording_mock(calls: list, name: str, return_value=None, side_effect: Exception = None) -> AsyncMock:
    """AsyncMock that appends ``name`` to ``calls`` each time it is awaited."""
    async def run(*args, **kwargs):
        calls.append(name)
        if side_effect is not None:
            raise side_effect
        return return_value

    return AsyncMock(side_effect=run)
