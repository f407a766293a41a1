import pytest

from app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidCredentialError,
    InvalidFormatError,
    MissingFieldError,
    NotFoundError,
)
from app.core.security import decode_access_token, verify_password
from app.db.base import new_id
from app.models.user import Role, User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import LoginRequest, RegisterRequest
from app.schemas.user import UserUpdate
from app.services import auth_service, user_service


class TestRegister:
    def test_register_hashes_password(self, db_session):
        user = auth_service.register_user(
            db_session,
            obj_in=RegisterRequest(
                name="Eva Martins",
                email="Eva@Escola.com",
                password="segredo1",
                role="student",
            ),
        )
        assert user.email == "eva@escola.com"
        assert user.password_hash != "segredo1"
        assert verify_password("segredo1", user.password_hash)

    def test_duplicate_email(self, db_session, test_teacher):
        with pytest.raises(ConflictError):
            auth_service.register_user(
                db_session,
                obj_in=RegisterRequest(
                    name="Outra Ana",
                    email="ANA@escola.com",
                    password="segredo1",
                    role="teacher",
                ),
            )

    def test_missing_fields(self, db_session):
        with pytest.raises(MissingFieldError):
            auth_service.register_user(
                db_session, obj_in=RegisterRequest(name="Eva", email="eva@escola.com")
            )

    def test_invalid_role_is_not_persisted(self, db_session):
        with pytest.raises(InvalidFormatError):
            auth_service.register_user(
                db_session,
                obj_in=RegisterRequest(
                    name="Eva", email="eva@escola.com", password="segredo1", role="admin"
                ),
            )
        assert db_session.query(User).count() == 0


class TestLogin:
    @pytest.fixture
    def registered(self, db_session):
        return auth_service.register_user(
            db_session,
            obj_in=RegisterRequest(
                name="Eva", email="eva@escola.com", password="segredo1", role="student"
            ),
        )

    def test_login_returns_token_for_user(self, db_session, registered):
        user, token = auth_service.login(
            db_session, obj_in=LoginRequest(email="eva@escola.com", password="segredo1")
        )
        actor = decode_access_token(token)
        assert user.id == registered.id
        assert (actor.id, actor.email, actor.role) == (registered.id, "eva@escola.com", "student")

    def test_wrong_password(self, db_session, registered):
        with pytest.raises(InvalidCredentialError):
            auth_service.login(
                db_session, obj_in=LoginRequest(email="eva@escola.com", password="errada")
            )

    def test_unknown_email(self, db_session):
        with pytest.raises(InvalidCredentialError):
            auth_service.login(
                db_session, obj_in=LoginRequest(email="ninguem@escola.com", password="x")
            )

    def test_tampered_token(self):
        with pytest.raises(InvalidCredentialError):
            decode_access_token("nao.e.um.token")


class TestListUsers:
    def test_by_role(self, db_session, test_teacher, other_teacher, test_student, student_actor):
        teachers = user_service.list_users_by_role(
            db_session, actor=student_actor, role=Role.TEACHER
        )
        students = user_service.list_users_by_role(
            db_session, actor=student_actor, role=Role.STUDENT
        )
        assert {u.id for u in teachers} == {test_teacher.id, other_teacher.id}
        assert [u.id for u in students] == [test_student.id]


class TestUpdateUser:
    def test_student_updates_self(self, db_session, test_student, student_actor):
        user = user_service.update_user(
            db_session,
            actor=student_actor,
            user_id=test_student.id,
            obj_in=UserUpdate(name="Carla D.", email="Carla.Dias@Escola.com"),
            role=Role.STUDENT,
        )
        assert user.name == "Carla D."
        assert user.email == "carla.dias@escola.com"

    def test_student_cannot_update_others(
        self, db_session, other_student, student_actor
    ):
        with pytest.raises(ForbiddenError):
            user_service.update_user(
                db_session,
                actor=student_actor,
                user_id=other_student.id,
                obj_in=UserUpdate(name="Hacker"),
            )

    def test_teacher_updates_anyone(self, db_session, test_student, teacher_actor):
        user = user_service.update_user(
            db_session,
            actor=teacher_actor,
            user_id=test_student.id,
            obj_in=UserUpdate(name="Carla Dias Souza"),
        )
        assert user.name == "Carla Dias Souza"

    def test_email_taken(self, db_session, test_student, test_teacher, student_actor):
        with pytest.raises(ConflictError):
            user_service.update_user(
                db_session,
                actor=student_actor,
                user_id=test_student.id,
                obj_in=UserUpdate(email=test_teacher.email),
            )

    def test_invalid_email(self, db_session, test_student, student_actor):
        with pytest.raises(InvalidFormatError):
            user_service.update_user(
                db_session,
                actor=student_actor,
                user_id=test_student.id,
                obj_in=UserUpdate(email="sem-arroba"),
            )

    def test_wrong_role_route(self, db_session, test_teacher, teacher_actor):
        with pytest.raises(InvalidFormatError):
            user_service.update_user(
                db_session,
                actor=teacher_actor,
                user_id=test_teacher.id,
                obj_in=UserUpdate(name="Ana"),
                role=Role.STUDENT,
            )

    def test_unknown_user(self, db_session, teacher_actor):
        with pytest.raises(NotFoundError):
            user_service.update_user(
                db_session, actor=teacher_actor, user_id=new_id(), obj_in=UserUpdate(name="x")
            )


class TestDeleteUser:
    def test_student_deletes_self(self, db_session, test_student, student_actor):
        user_service.delete_user(
            db_session, actor=student_actor, user_id=test_student.id, role=Role.STUDENT
        )
        assert db_session.get(User, test_student.id) is None

    def test_student_cannot_delete_teacher(self, db_session, test_teacher, student_actor):
        with pytest.raises(ForbiddenError):
            user_service.delete_user(
                db_session, actor=student_actor, user_id=test_teacher.id, role=Role.TEACHER
            )


class TestUserRepository:
    def test_list_all_and_lookups(self, db_session, test_teacher, test_student):
        repo = UserRepository(db_session)
        assert {u.id for u in repo.list_all()} == {test_teacher.id, test_student.id}
        assert repo.find_by_email(" CARLA@escola.com").id == test_student.id
        assert repo.email_exists("ana@escola.com")
        assert not repo.email_exists("ninguem@escola.com")

    def test_create_duplicate_email_is_conflict(self, db_session, test_teacher):
        duplicate = User(
            name="Ana 2", email=test_teacher.email, password_hash="x", role="teacher"
        )
        with pytest.raises(ConflictError):
            UserRepository(db_session).create(duplicate)
