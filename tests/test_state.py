"""Tests for the observable state containers."""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from easyconnect.modules.auth.service import AuthService
from easyconnect.modules.groups.schemas import GroupCreate
from easyconnect.modules.groups.service import GroupService
from easyconnect.modules.invites.service import InviteService
from easyconnect.state.auth import AuthSession
from easyconnect.state.home import HomeState
from easyconnect.state.store import StateContainer


class TestStateContainer:
    def test_get_set(self):
        container = StateContainer(1)
        container.set(2)
        assert container.get() == 2

    def test_subscribers_notified_on_every_update(self):
        container = StateContainer(0)
        seen = []
        container.subscribe(seen.append)
        container.set(1)
        container.update(lambda v: v + 10)
        assert seen == [1, 11]

    def test_unsubscribe_stops_notifications(self):
        container = StateContainer(0)
        seen = []
        unsubscribe = container.subscribe(seen.append)
        container.set(1)
        unsubscribe()
        container.set(2)
        assert seen == [1]
        unsubscribe()

    def test_subscriber_may_read_container(self):
        container = StateContainer("a")
        seen = []
        container.subscribe(lambda _: seen.append(container.get()))
        container.set("b")
        assert seen == ["b"]

    def test_concurrent_updates_not_lost(self):
        container = StateContainer(0)

        def bump():
            for _ in range(500):
                container.update(lambda v: v + 1)

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert container.get() == 2000


@pytest.fixture
def home(fake_db):
    return HomeState(GroupService(fake_db), InviteService(fake_db))


class TestHomeState:
    def test_refresh_loads_groups_and_invites(self, home):
        snapshot = asyncio.run(home.refresh("u1"))
        assert [g.id for g in snapshot.groups] == ["g1"]
        assert [i.id for i in snapshot.pending_invites] == ["g2"]
        assert snapshot.is_loading is False
        assert snapshot.error_message is None

    def test_loading_flag_published(self, home):
        flags = []
        home.subscribe(lambda s: flags.append(s.is_loading))
        asyncio.run(home.refresh("u1"))
        assert flags == [True, False]

    def test_failure_recorded_as_message(self, home, fake_db):
        fake_db.fail("group_members", "select", RuntimeError("connection reset"))
        snapshot = asyncio.run(home.refresh("u1"))
        assert snapshot.is_loading is False
        assert "connection reset" in snapshot.error_message

    def test_accept_invite_refreshes(self, home):
        asyncio.run(home.respond_to_invite("g2", "u1", accept=True))
        assert sorted(g.id for g in home.snapshot.groups) == ["g1", "g2"]
        assert home.snapshot.pending_invites == []

    def test_missing_invite_sets_error(self, home):
        asyncio.run(home.respond_to_invite("g2", "u4", accept=True))
        assert home.snapshot.error_message == "Invitation not found"

    def test_create_group_refreshes(self, home):
        group_id = asyncio.run(home.create_group(GroupCreate(name="Cyclists", group_type_id=1), "u1"))
        assert group_id in [g.id for g in home.snapshot.groups]

    def test_delete_group_refreshes(self, home):
        asyncio.run(home.refresh("u1"))
        asyncio.run(home.delete_group("g1", "u1"))
        assert home.snapshot.groups == []

    def test_writes_run_off_the_event_loop(self, fake_db):
        threads = []

        class RecordingGroupService(GroupService):
            def create_group(self, group_data, user_id):
                threads.append(threading.current_thread())
                return super().create_group(group_data, user_id)

            def delete_group(self, group_id):
                threads.append(threading.current_thread())
                return super().delete_group(group_id)

        class RecordingInviteService(InviteService):
            def respond_to_invite(self, group_id, user_id, accept):
                threads.append(threading.current_thread())
                return super().respond_to_invite(group_id, user_id, accept)

        home = HomeState(RecordingGroupService(fake_db), RecordingInviteService(fake_db))
        asyncio.run(home.create_group(GroupCreate(name="Cyclists", group_type_id=1), "u1"))
        asyncio.run(home.respond_to_invite("g2", "u1", accept=True))
        asyncio.run(home.delete_group("g1", "u1"))
        assert len(threads) == 3
        assert all(t is not threading.main_thread() for t in threads)


def signed_in_response(user_id="u1", email="alice@example.com"):
    user = MagicMock()
    user.id = user_id
    user.email = email
    session = MagicMock()
    session.access_token = "token-1"
    return MagicMock(user=user, session=session)


@pytest.fixture
def session_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def auth_session(fake_db, session_client) -> AuthSession:
    return AuthSession(AuthService(fake_db, session_factory=lambda: session_client))


class TestAuthSession:
    def test_sign_in_sets_current_user(self, auth_session, session_client):
        session_client.auth.sign_in_with_password.return_value = signed_in_response()
        seen = []
        auth_session.current_user.subscribe(seen.append)
        auth_session.sign_in("alice@example.com", "pw")
        assert auth_session.is_authenticated
        assert auth_session.current_user.get().id == "u1"
        assert seen[0].email == "alice@example.com"

    def test_sign_in_failure_keeps_signed_out(self, auth_session, session_client):
        session_client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        with pytest.raises(Exception):
            auth_session.sign_in("alice@example.com", "wrong")
        assert not auth_session.is_authenticated

    def test_sign_up_sets_current_user(self, auth_session, session_client):
        session_client.auth.sign_up.return_value = signed_in_response("u9", "new@example.com")
        auth_session.sign_up("new@example.com", "pw")
        assert auth_session.current_user.get().id == "u9"

    def test_sign_out_clears_user(self, auth_session, session_client):
        session_client.auth.sign_in_with_password.return_value = signed_in_response()
        auth_session.sign_in("alice@example.com", "pw")
        assert auth_session.sign_out() is True
        assert not auth_session.is_authenticated
        session_client.auth.admin.sign_out.assert_called_once_with("token-1")

    def test_failed_sign_out_keeps_user(self, auth_session, session_client):
        session_client.auth.sign_in_with_password.return_value = signed_in_response()
        session_client.auth.admin.sign_out.side_effect = RuntimeError("offline")
        auth_session.sign_in("alice@example.com", "pw")
        assert auth_session.sign_out() is False
        assert auth_session.is_authenticated

    def test_shared_client_never_signed_in(self, auth_session, session_client, fake_db):
        session_client.auth.sign_in_with_password.return_value = signed_in_response()
        auth_session.sign_in("alice@example.com", "pw")
        assert fake_db.auth.method_calls == []
