from hypothesis import given
from hypothesis import strategies as st

from n8n_mcp.core.credentials import resolve_credential
from n8n_mcp.core.errors import AuthenticationRequired
from n8n_mcp.core.sessions import SessionCredentialStore
from n8n_mcp.mcp.tools.common import parse_limit

_KEYS = st.one_of(st.none(), st.from_regex(r"[A-Za-z0-9]{1,16}", fullmatch=True))


@given(session_key=_KEYS, header_key=_KEYS, default_key=_KEYS)
def test_first_available_source_wins(
    session_key: str | None, header_key: str | None, default_key: str | None
) -> None:
    store = SessionCredentialStore()
    session_id = store.store(session_key) if session_key else None
    headers = {"N8N-API-KEY": header_key} if header_key else {}

    expected = session_key or header_key or default_key
    if expected is None:
        try:
            resolve_credential(session_id, headers, store, default_key)
        except AuthenticationRequired:
            return
        raise AssertionError("expected AuthenticationRequired")

    assert resolve_credential(session_id, headers, store, default_key) == expected


@given(st.one_of(st.integers(), st.text(max_size=6), st.none(), st.booleans()))
def test_parse_limit_stays_within_bounds(value: object) -> None:
    limit = parse_limit(value, default=10, maximum=100)
    assert 1 <= limit <= 100
