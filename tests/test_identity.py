import pytest

from app.core.time import now_utc8
from app.core.exceptions import UserNotFound
from app.models.user import User
from app.schemas.user import UserCreate
from app.service.identity_svc import resolve_user, resolve_pair


class TestResolveUser:
    def test_resolves_uid_string(self, repos, alice):
        assert resolve_user(repos.users, alice.uid) == alice.uid

    def test_resolves_user_object(self, repos, alice):
        assert resolve_user(repos.users, alice) == alice.uid

    def test_resolves_numeric_id(self, repos, alice, pk_of):
        pk = pk_of(alice.uid)
        assert resolve_user(repos.users, pk) == alice.uid
        assert resolve_user(repos.users, str(pk)) == alice.uid

    def test_unknown_uid_is_not_found(self, repos):
        with pytest.raises(UserNotFound) as exc:
            resolve_user(repos.users, "no-such-user")
        assert exc.value.reference == "no-such-user"
        assert exc.value.status_code == 404

    def test_unknown_numeric_id_is_not_found(self, repos, alice):
        with pytest.raises(UserNotFound):
            resolve_user(repos.users, 99999)

    @pytest.mark.parametrize("reference", [None, True, "", "   ", object()])
    def test_unusable_references(self, repos, reference):
        with pytest.raises(UserNotFound):
            resolve_user(repos.users, reference)

    def test_soft_deleted_user_is_not_found(self, repos, db_session, alice):
        db_session.query(User).filter(User.uid == alice.uid).update({User.deleted_at: now_utc8()})
        db_session.commit()

        with pytest.raises(UserNotFound):
            resolve_user(repos.users, alice.uid)

    def test_resolve_pair(self, repos, alice, bob, pk_of):
        assert resolve_pair(repos.users, alice, pk_of(bob.uid)) == (alice.uid, bob.uid)


class TestUserRepository:
    def test_create_and_lookup(self, repos):
        user = repos.users.create_user(UserCreate(username="erin", bio="hi"))

        assert len(user.uid) == 36
        assert repos.users.get_user_by_uid(user.uid) == user
        assert repos.users.get_user_by_uid("ghost") is None
