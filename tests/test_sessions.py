from datetime import timedelta

from models import store
from services.sessions import get_session, issue_session, purge_expired_sessions, revoke_session
from utils.dates import utcnow, to_iso


def _expire_all():
    with store.transaction("sessions") as data:
        for record in data["sessions"]:
            record["expires_at"] = to_iso(utcnow() - timedelta(seconds=1))


def test_issue_session_stores_only_token_hash(ctx, verified_user):
    token, session = issue_session(verified_user)
    records = store.read("sessions")
    assert len(records) == 1
    assert records[0]["user_id"] == verified_user.id
    assert token not in str(records)
    assert session.token_hash == records[0]["token_hash"]


def test_session_lifetime_is_seven_days(ctx, verified_user):
    _token, session = issue_session(verified_user)
    remaining = session.is_expired(utcnow() + timedelta(days=7, seconds=1))
    assert remaining is True
    assert session.is_expired(utcnow() + timedelta(days=6)) is False


def test_get_session_returns_live_session(ctx, verified_user):
    token, _session = issue_session(verified_user)
    assert get_session(token).user_id == verified_user.id
    assert get_session("not-a-token") is None
    assert get_session(None) is None


def test_expired_session_is_rejected_and_deleted(ctx, verified_user):
    token, _session = issue_session(verified_user)
    _expire_all()
    assert get_session(token) is None
    assert store.read("sessions") == []


def test_revoke_session(ctx, verified_user):
    token, _session = issue_session(verified_user)
    other, _session = issue_session(verified_user)
    assert revoke_session(token) is True
    assert get_session(token) is None
    assert get_session(other) is not None
    assert revoke_session(token) is False


def test_purge_expired_sessions(ctx, verified_user):
    issue_session(verified_user)
    issue_session(verified_user)
    _expire_all()
    live, _session = issue_session(verified_user)
    assert purge_expired_sessions() == 2
    assert get_session(live) is not None
