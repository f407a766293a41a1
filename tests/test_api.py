"""HTTP surface: routing, auth header handling and error status mapping."""

from app.db.base import new_id
from tests.conftest import activity_payload


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()

    def test_db_health(self, client):
        assert client.get("/api/health/db").json() == {"status": "ok"}


class TestAuthApi:
    def test_register_login_profile(self, client):
        response = client.post(
            "/api/auth/registrar",
            json={
                "name": "Eva Martins",
                "email": "eva@escola.com",
                "password": "segredo1",
                "role": "teacher",
            },
        )
        assert response.status_code == 201
        assert "password_hash" not in response.json()["user"]

        response = client.post(
            "/api/auth/login", json={"email": "eva@escola.com", "password": "segredo1"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"

        response = client.get(
            "/api/auth/perfil",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "eva@escola.com"

    def test_register_reports_every_field(self, client):
        response = client.post(
            "/api/auth/registrar",
            json={"name": " ", "email": "ruim", "password": "1", "role": "admin"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["kind"] == "missing_field"
        assert {d["field"] for d in body["details"]} == {"name", "email", "password", "role"}

    def test_register_duplicate_email(self, client, test_teacher):
        response = client.post(
            "/api/auth/registrar",
            json={
                "name": "Ana",
                "email": test_teacher.email,
                "password": "segredo1",
                "role": "teacher",
            },
        )
        assert response.status_code == 409
        assert response.json()["kind"] == "conflict"

    def test_bad_login(self, client):
        response = client.post(
            "/api/auth/login", json={"email": "x@escola.com", "password": "segredo1"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Credenciais inválidas."

    def test_missing_token(self, client):
        response = client.get("/api/atividades")
        assert response.status_code == 401
        assert response.json()["kind"] == "unauthenticated"

    def test_invalid_token(self, client):
        response = client.get(
            "/api/atividades", headers={"Authorization": "Bearer nao-e-um-token"}
        )
        assert response.status_code == 401


class TestActivitiesApi:
    def test_create_and_read(self, client, test_teacher, auth_headers):
        response = client.post(
            "/api/atividades", json=activity_payload(), headers=auth_headers(test_teacher)
        )
        assert response.status_code == 201
        activity = response.json()["activity"]
        assert activity["status"] == "draft"
        assert activity["is_public"] is False

        response = client.get(
            f"/api/atividades/{activity['id']}", headers=auth_headers(test_teacher)
        )
        assert response.status_code == 200
        assert response.json()["activity"]["title"] == "Frações no cotidiano"

    def test_student_cannot_create(self, client, test_student, auth_headers):
        response = client.post(
            "/api/atividades", json=activity_payload(), headers=auth_headers(test_student)
        )
        assert response.status_code == 403

    def test_validation_error_names_question(self, client, test_teacher, auth_headers):
        payload = activity_payload(
            content=[{"prompt": "Escolha", "kind": "multiple_choice", "choices": []}]
        )
        response = client.post(
            "/api/atividades", json=payload, headers=auth_headers(test_teacher)
        )
        assert response.status_code == 400
        assert "Conteúdo[0]" in response.json()["error"]

    def test_null_choices_names_the_question(self, client, test_teacher, auth_headers):
        payload = activity_payload(
            content=[{"prompt": "Escolha", "kind": "multiple_choice", "choices": None}]
        )
        response = client.post(
            "/api/atividades", json=payload, headers=auth_headers(test_teacher)
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "missing_field"
        assert "Conteúdo[0]" in response.json()["error"]

    def test_malformed_id(self, client, test_teacher, auth_headers):
        response = client.get("/api/atividades/123", headers=auth_headers(test_teacher))
        assert response.status_code == 400
        assert response.json()["details"][0]["code"] == "invalid_id"

    def test_not_found(self, client, test_teacher, auth_headers):
        response = client.get(
            f"/api/atividades/{new_id()}", headers=auth_headers(test_teacher)
        )
        assert response.status_code == 404

    def test_other_teacher_cannot_update(
        self, client, test_activity, other_teacher, auth_headers
    ):
        response = client.put(
            f"/api/atividades/{test_activity.id}",
            json={"title": "Minha agora"},
            headers=auth_headers(other_teacher),
        )
        assert response.status_code == 403

    def test_update_rejects_non_patchable_fields(
        self, client, test_activity, test_teacher, auth_headers
    ):
        response = client.put(
            f"/api/atividades/{test_activity.id}",
            json={"finalized": True},
            headers=auth_headers(test_teacher),
        )
        assert response.status_code == 400

    def test_publish_twice_is_conflict(self, client, test_activity, test_teacher, auth_headers):
        url = f"/api/atividades/{test_activity.id}/publicar"
        assert client.post(url, headers=auth_headers(test_teacher)).status_code == 200
        response = client.post(url, headers=auth_headers(test_teacher))
        assert response.status_code == 409
        assert response.json()["kind"] == "invalid_state"

    def test_make_public_twice_succeeds(self, client, test_activity, test_teacher, auth_headers):
        url = f"/api/atividades/{test_activity.id}/tornar-publica"
        for _ in range(2):
            response = client.post(url, headers=auth_headers(test_teacher))
            assert response.status_code == 200
        assert response.json()["activity"]["is_public"] is True

    def test_duplicate(self, client, test_activity, test_teacher, auth_headers):
        response = client.post(
            f"/api/atividades/{test_activity.id}/duplicar", headers=auth_headers(test_teacher)
        )
        assert response.status_code == 201
        assert response.json()["activity"]["id"] != test_activity.id

    def test_add_material(self, client, test_activity, test_teacher, auth_headers):
        response = client.post(
            f"/api/atividades/{test_activity.id}/materiais",
            json={"kind": "pdf", "content": "https://escola.com/apostila.pdf"},
            headers=auth_headers(test_teacher),
        )
        assert response.status_code == 201
        assert len(response.json()["activity"]["support_materials"]) == 1

    def test_student_view_hides_answers_and_other_students(
        self, client, published_activity, test_student, auth_headers
    ):
        response = client.get(
            f"/api/atividades/{published_activity.id}", headers=auth_headers(test_student)
        )
        assert response.status_code == 200
        activity = response.json()["activity"]
        assert all(q["correct_answer"] is None for q in activity["content"])
        assert [e["student_email"] for e in activity["enrollments"]] == [test_student.email]

    def test_student_list(self, client, published_activity, test_student, auth_headers):
        response = client.get("/api/atividades", headers=auth_headers(test_student))
        assert response.status_code == 200
        assert response.json()["total"] == 1

    def test_delete(self, client, test_activity, test_teacher, auth_headers):
        response = client.delete(
            f"/api/atividades/{test_activity.id}", headers=auth_headers(test_teacher)
        )
        assert response.status_code == 200


class TestEnrollmentsApi:
    def test_enroll_and_list(self, client, test_activity, test_teacher, auth_headers):
        response = client.post(
            "/api/inscricoes",
            json={"activity_id": test_activity.id, "emails": ["a@escola.com", "b@escola.com"]},
            headers=auth_headers(test_teacher),
        )
        assert response.status_code == 201
        assert response.json()["new_enrollments"] == 2

        response = client.get(
            f"/api/inscricoes?activity_id={test_activity.id}",
            headers=auth_headers(test_teacher),
        )
        assert response.status_code == 200
        assert response.json()["total"] == 2

    def test_missing_activity_id(self, client, test_teacher, auth_headers):
        response = client.get("/api/inscricoes", headers=auth_headers(test_teacher))
        assert response.status_code == 400
        assert response.json()["kind"] == "missing_field"

    def test_student_cannot_list(self, client, published_activity, test_student, auth_headers):
        response = client.get(
            f"/api/inscricoes?activity_id={published_activity.id}",
            headers=auth_headers(test_student),
        )
        assert response.status_code == 403

    def test_delete_enrollment(self, client, published_activity, test_teacher, auth_headers):
        enrollment_id = published_activity.enrollments[0].id
        response = client.delete(
            f"/api/inscricoes/{enrollment_id}?activity_id={published_activity.id}",
            headers=auth_headers(test_teacher),
        )
        assert response.status_code == 200


class TestAnswersApi:
    def _answers(self, activity):
        return [{"question_id": q["id"], "answer_text": "3/4"} for q in activity.content]

    def test_submit_and_list(self, client, published_activity, test_student, auth_headers):
        response = client.post(
            "/api/respostas",
            json={
                "activity_id": published_activity.id,
                "answers": self._answers(published_activity),
                "submitted": True,
            },
            headers=auth_headers(test_student),
        )
        assert response.status_code == 200

        response = client.get(
            f"/api/respostas?activity_id={published_activity.id}",
            headers=auth_headers(test_student),
        )
        body = response.json()
        assert body["total"] == 1
        assert body["answer_sets"][0]["submitted"] is True

    def test_unknown_question(self, client, published_activity, test_student, auth_headers):
        response = client.post(
            "/api/respostas",
            json={
                "activity_id": published_activity.id,
                "answers": [{"question_id": "q-inexistente", "answer_text": "x"}],
            },
            headers=auth_headers(test_student),
        )
        assert response.status_code == 404
        assert "q-inexistente" in response.json()["error"]

    def test_finalized_activity_is_forbidden(
        self, client, published_activity, test_teacher, test_student, auth_headers
    ):
        client.post(
            f"/api/atividades/{published_activity.id}/finalizar",
            headers=auth_headers(test_teacher),
        )
        response = client.post(
            "/api/respostas",
            json={
                "activity_id": published_activity.id,
                "answers": self._answers(published_activity),
            },
            headers=auth_headers(test_student),
        )
        assert response.status_code == 403


class TestUsersApi:
    def test_list_students(self, client, test_student, test_teacher, auth_headers):
        response = client.get("/api/usuarios/alunos", headers=auth_headers(test_teacher))
        assert response.status_code == 200
        assert [u["email"] for u in response.json()["users"]] == [test_student.email]

    def test_teacher_on_student_route(self, client, test_teacher, auth_headers):
        response = client.put(
            f"/api/usuarios/alunos/{test_teacher.id}",
            json={"name": "Ana"},
            headers=auth_headers(test_teacher),
        )
        assert response.status_code == 400

    def test_student_cannot_delete_other_student(
        self, client, test_student, other_student, auth_headers
    ):
        response = client.delete(
            f"/api/usuarios/alunos/{other_student.id}", headers=auth_headers(test_student)
        )
        assert response.status_code == 403


class TestNonOwnerTeacherView:
    """Another teacher may read a public activity but not its students' data."""

    def _share_with_answer(self, client, activity, owner, student, auth_headers):
        client.post(
            f"/api/atividades/{activity.id}/tornar-publica", headers=auth_headers(owner)
        )
        client.post(
            "/api/respostas",
            json={
                "activity_id": activity.id,
                "answers": [
                    {"question_id": q["id"], "answer_text": "3/4"} for q in activity.content
                ],
            },
            headers=auth_headers(student),
        )

    def test_read_hides_enrollments_and_answers(
        self, client, published_activity, test_teacher, other_teacher, test_student, auth_headers
    ):
        self._share_with_answer(
            client, published_activity, test_teacher, test_student, auth_headers
        )

        response = client.get(
            f"/api/atividades/{published_activity.id}", headers=auth_headers(other_teacher)
        )
        assert response.status_code == 200
        activity = response.json()["activity"]
        assert activity["enrollments"] == []
        assert activity["answer_sets"] == []

        owner_view = client.get(
            f"/api/atividades/{published_activity.id}", headers=auth_headers(test_teacher)
        ).json()["activity"]
        assert len(owner_view["enrollments"]) == 1
        assert len(owner_view["answer_sets"]) == 1

    def test_list_hides_enrollments_and_answers(
        self, client, published_activity, test_teacher, other_teacher, test_student, auth_headers
    ):
        self._share_with_answer(
            client, published_activity, test_teacher, test_student, auth_headers
        )

        response = client.get("/api/atividades", headers=auth_headers(other_teacher))
        activities = response.json()["activities"]
        assert [a["id"] for a in activities] == [published_activity.id]
        assert activities[0]["enrollments"] == []
        assert activities[0]["answer_sets"] == []
