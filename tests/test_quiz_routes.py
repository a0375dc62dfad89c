from sqlalchemy.exc import SQLAlchemyError

from models import db, Quiz


def _start(client, headers, quiz_id):
    return client.post(f"/api/quizzes/{quiz_id}/start", headers=headers)


def _submit(client, headers, attempt_id, responses, **extra):
    body = {"responses": responses, **extra}
    return client.post(f"/api/quizzes/attempts/{attempt_id}/submit", json=body, headers=headers)


def test_requires_a_valid_token(client, make_quiz):
    quiz_id = make_quiz()
    assert client.post(f"/api/quizzes/{quiz_id}/start").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert client.post(f"/api/quizzes/{quiz_id}/start", headers=bad).status_code == 401


def test_start_returns_sanitized_questions(client, auth_headers, make_quiz):
    quiz_id = make_quiz(reveal_correct_answers=True, time_limit_seconds=600)
    response = _start(client, auth_headers(), quiz_id)

    assert response.status_code == 201
    data = response.get_json()
    assert data["attempt_number"] == 1
    assert data["state"] == "in_progress"
    assert data["deadline"] == "2025-06-10T09:10:00"
    assert len(data["questions"]) == 2
    for question in data["questions"]:
        assert set(question) == {"question_id", "text", "type", "options"}
    assert "Reconnaissance gathers" not in response.get_data(as_text=True)


def test_expired_token_is_rejected(client, auth_headers, make_quiz):
    quiz_id = make_quiz()
    expired = auth_headers(hours=-1)
    assert client.post(f"/api/quizzes/{quiz_id}/start", headers=expired).status_code == 401


def test_start_survives_malformed_question_rows(client, auth_headers, make_quiz):
    questions = [
        {"question_text": "Broken", "options": "null", "correct_answer": "0"},
        {"question_text": "Fine", "options": ["a", "b"], "correct_answer": "1"},
    ]
    quiz_id = make_quiz(questions=questions)

    response = _start(client, auth_headers(), quiz_id)

    assert response.status_code == 201
    assert [q["options"] for q in response.get_json()["questions"]] == [[], ["a", "b"]]


def test_second_start_conflicts_and_points_at_the_running_attempt(client, auth_headers, make_quiz):
    quiz_id = make_quiz()
    headers = auth_headers()
    first = _start(client, headers, quiz_id).get_json()

    response = _start(client, headers, quiz_id)

    assert response.status_code == 409
    assert response.get_json() == {
        "error": "An attempt is already in progress for this quiz",
        "kind": "conflict",
        "attempt_id": first["attempt_id"],
    }


def test_submit_then_resubmit(client, auth_headers, make_quiz):
    quiz_id = make_quiz(passing_score=50)
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    first_q, second_q = [q["question_id"] for q in started["questions"]]

    response = _submit(client, headers, started["attempt_id"], [
        {"question_id": first_q, "answer": 0},
        {"question_id": second_q, "answer": 3},
    ], time_spent=12)

    assert response.status_code == 200
    result = response.get_json()
    assert result["score"] == 50
    assert result["is_passed"] is True
    assert result["state"] == "completed"
    assert all("correct_answer" not in q for q in result["per_question"])

    again = _submit(client, headers, started["attempt_id"], [{"question_id": first_q, "answer": 0}])
    assert again.status_code == 409
    assert again.get_json()["kind"] == "already_completed"

    stored = client.get(f"/api/quizzes/attempts/{started['attempt_id']}", headers=headers).get_json()
    assert stored["score"] == 50


def test_reveal_after_completion_only(client, auth_headers, make_quiz):
    quiz_id = make_quiz(reveal_correct_answers=True)
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    url = f"/api/quizzes/attempts/{started['attempt_id']}"

    running = client.get(url, headers=headers)
    assert running.get_json()["state"] == "in_progress"
    assert "correct_answer" not in running.get_data(as_text=True)

    _submit(client, headers, started["attempt_id"], [])
    done = client.get(url, headers=headers).get_json()
    assert [q["correct_answer"] for q in done["per_question"]] == [0, 1]
    assert done["reveal_answers"] is True


def test_turning_reveal_off_hides_answers_of_past_attempts(client, auth_headers, make_quiz):
    quiz_id = make_quiz(reveal_correct_answers=True)
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    _submit(client, headers, started["attempt_id"], [])

    quiz = db.session.get(Quiz, quiz_id)
    quiz.reveal_correct_answers = False
    db.session.commit()

    body = client.get(f"/api/quizzes/attempts/{started['attempt_id']}", headers=headers).get_data(as_text=True)
    assert "correct_answer" not in body
    assert "explanation" not in body


def test_late_submit_expires_and_blocks_further_attempts(client, auth_headers, make_quiz, clock):
    quiz_id = make_quiz(time_limit_seconds=60, max_attempts=1)
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    first_q = started["questions"][0]["question_id"]

    clock.advance(61)
    result = _submit(client, headers, started["attempt_id"], [{"question_id": first_q, "answer": 0}],
                     time_spent=5).get_json()

    assert result["state"] == "expired"
    assert result["score"] == 50

    blocked = _start(client, headers, quiz_id)
    assert blocked.status_code == 403
    assert blocked.get_json()["kind"] == "attempt_limit_exceeded"


def test_invalid_submissions_are_rejected_without_closing_the_attempt(client, auth_headers, make_quiz):
    quiz_id = make_quiz()
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    attempt_id = started["attempt_id"]

    unknown = _submit(client, headers, attempt_id, [{"question_id": 987654, "answer": 0}])
    assert unknown.status_code == 400
    assert unknown.get_json()["kind"] == "validation_error"

    not_json = client.post(f"/api/quizzes/attempts/{attempt_id}/submit", data="oops",
                           content_type="text/plain", headers=headers)
    assert not_json.status_code == 400

    wrong_shape = _submit(client, headers, attempt_id, {"question_id": 1})
    assert wrong_shape.status_code == 400

    state = client.get(f"/api/quizzes/attempts/{attempt_id}", headers=headers).get_json()["state"]
    assert state == "in_progress"


def test_missing_inactive_and_foreign_resources_are_not_found(client, auth_headers, make_quiz):
    inactive = make_quiz(is_active=False)
    assert _start(client, auth_headers(), 999).status_code == 404
    assert _start(client, auth_headers(), inactive).status_code == 404

    quiz_id = make_quiz()
    started = _start(client, auth_headers(1), quiz_id).get_json()
    other = auth_headers(2)
    assert client.get(f"/api/quizzes/attempts/{started['attempt_id']}", headers=other).status_code == 404
    assert _submit(client, other, started["attempt_id"], []).status_code == 404


def test_attempt_history(client, auth_headers, make_quiz):
    quiz_id = make_quiz(max_attempts=3)
    headers = auth_headers()
    for _ in range(2):
        started = _start(client, headers, quiz_id).get_json()
        _submit(client, headers, started["attempt_id"], [])

    history = client.get(f"/api/quizzes/{quiz_id}/attempts", headers=headers).get_json()

    assert history["attempts_used"] == 2
    assert history["attempts_left"] == 1
    assert [a["attempt_number"] for a in history["attempts"]] == [2, 1]
    assert client.get("/api/quizzes/999/attempts", headers=headers).status_code == 404


def test_passing_attempt_updates_progress(client, auth_headers, make_quiz):
    quiz_id = make_quiz(passing_score=50)
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    answers = [{"question_id": q["question_id"], "answer": i} for i, q in enumerate(started["questions"])]
    assert _submit(client, headers, started["attempt_id"], answers).get_json()["score"] == 100

    progress = client.get("/api/quizzes/progress", headers=headers).get_json()["progress"]
    values = {(p["category"], p["metric"]): p["value"] for p in progress}

    assert values[("quizzes", "completed_quizzes")] == 1
    assert values[("quizzes", "average_score")] == 100
    assert values[("points", "study_points")] == 20


def test_failed_attempt_leaves_progress_alone(client, auth_headers, make_quiz):
    quiz_id = make_quiz(passing_score=50)
    headers = auth_headers()
    started = _start(client, headers, quiz_id).get_json()
    _submit(client, headers, started["attempt_id"], [])

    assert client.get("/api/quizzes/progress", headers=headers).get_json() == {"progress": []}


def test_storage_failures_are_opaque(app, client, auth_headers, monkeypatch):
    store = app.extensions["attempt_manager"].store

    def broken(attempt_id):
        raise SQLAlchemyError("connection to server lost")

    monkeypatch.setattr(store, "get_attempt", broken)
    response = client.get("/api/quizzes/attempts/1", headers=auth_headers())

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal server error"}
