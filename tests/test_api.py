import pytest
from fastapi.testclient import TestClient

from main import app, get_controller

from conftest import make_controller


RESUME = b"Jane Doe\njane@example.com\nReact and Node.js developer\n"


@pytest.fixture
def controller():
    return make_controller()


@pytest.fixture
def client(controller):
    app.dependency_overrides[get_controller] = lambda: controller
    with TestClient(app) as test_client:
        yield test_client
        test_client.post("/restart")
    app.dependency_overrides.clear()


def upload(client, data=RESUME, filename="resume.txt"):
    return client.post("/upload-resume", files={"file": (filename, data, "text/plain")})


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["stage"] == "upload"


def test_upload_resume_reports_missing_fields(client):
    response = upload(client)
    assert response.status_code == 200
    body = response.json()
    assert body["candidate"]["name"] == "Jane Doe"
    assert body["missing_fields"] == ["phone"]
    assert body["stage"]["stage"] == "profile"
    assert "phone number" in body["interviewer_message"]


def test_upload_rejects_unsupported_file(client):
    response = upload(client, data=b"\x89PNG", filename="photo.png")
    assert response.status_code == 400


def test_start_requires_complete_profile(client):
    assert client.post("/start-interview").status_code == 400
    upload(client)
    response = client.post("/start-interview")
    assert response.status_code == 400
    assert "phone" in response.json()["detail"]


def test_full_flow(client):
    upload(client)

    status = client.post("/profile-message", json={"message": "555-1234"}).json()
    assert status["candidate"]["phone"] == "555-1234"
    assert status["missing_fields"] == []

    status = client.post("/profile-message", json={"message": "ready"}).json()
    assert status["stage"]["stage"] == "interview"
    assert status["session"]["status"] == "in_progress"
    assert status["timer"]["time_limit"] == 20

    assert client.put("/draft", json={"text": "draft"}).json() == {"status": "saved"}

    body = client.post("/submit-answer", json={"answer": "A closure captures scope.", "question_index": 0}).json()
    assert body["accepted"] is True
    assert body["evaluation"]["score"] == 80
    assert body["status"]["session"]["current_question_index"] == 1

    stale = client.post("/submit-answer", json={"answer": "late", "question_index": 0}).json()
    assert stale["accepted"] is False

    paused = client.post("/pause").json()
    assert paused["stage"]["awaiting_resume_decision"] is True
    assert client.post("/pause").status_code == 400

    resumed = client.post("/resume").json()
    assert resumed["session"]["status"] == "in_progress"
    assert resumed["timer"]["remaining"] == 20

    for i in range(5):
        client.post("/submit-answer", json={"answer": f"answer {i}"})

    status = client.get("/interview-status").json()
    assert status["stage"]["stage"] == "completed"
    assert status["session"]["total_score"] == 480

    report = client.get("/interview-report").json()
    assert report["report"]["total_score"] == 480
    assert report["report"]["passed"] is True

    completed = client.get("/completed-interviews").json()
    assert len(completed) == 1
    assert completed[0]["total_score"] == 480
    assert completed[0]["candidate"]["name"] == "Jane Doe"


def test_end_interview(client):
    upload(client)
    client.post("/profile-message", json={"message": "555-1234"})
    client.post("/start-interview")
    client.post("/submit-answer", json={"answer": "only one"})

    body = client.post("/end-interview").json()
    assert body["status"] == "Interview ended"
    assert body["total_score"] == 80
    assert client.post("/end-interview").status_code == 400


def test_session_endpoints_require_session(client):
    assert client.post("/pause").status_code == 400
    assert client.get("/interview-report").status_code == 400
    assert client.put("/draft", json={"text": "x"}).status_code == 400


def test_restart(client):
    upload(client)
    body = client.post("/restart").json()
    assert body["stage"]["stage"] == "upload"
    assert client.get("/interview-status").json()["candidate"] is None


def finish_interview(client, resume, answers):
    upload(client, data=resume)
    client.post("/profile-message", json={"message": "555-1234"})
    client.post("/start-interview")
    for i in range(answers):
        client.post("/submit-answer", json={"answer": f"answer {i}"})
    if answers < 6:
        client.post("/end-interview")
    client.post("/restart")


@pytest.fixture
def reviewed(client):
    finish_interview(client, RESUME, 6)
    finish_interview(client, b"Sam Lee\nsam@example.com\n", 4)
    finish_interview(client, b"Ana Ruiz\nana@example.com\n", 5)
    return client


def names(response):
    assert response.status_code == 200
    return [entry["candidate"]["name"] for entry in response.json()]


def test_completed_interviews_sorting(reviewed):
    assert names(reviewed.get("/completed-interviews")) == ["Jane Doe", "Ana Ruiz", "Sam Lee"]
    assert names(reviewed.get("/completed-interviews", params={"sort_by": "name"})) == [
        "Ana Ruiz", "Jane Doe", "Sam Lee"
    ]
    assert names(reviewed.get("/completed-interviews", params={"sort_by": "date"})) == [
        "Ana Ruiz", "Sam Lee", "Jane Doe"
    ]
    assert reviewed.get("/completed-interviews", params={"sort_by": "age"}).status_code == 422


def test_completed_interviews_search(reviewed):
    assert names(reviewed.get("/completed-interviews", params={"search": "JANE"})) == ["Jane Doe"]
    assert names(reviewed.get("/completed-interviews", params={"search": "sam@example"})) == ["Sam Lee"]
    assert names(reviewed.get("/completed-interviews", params={"search": "nobody"})) == []


def test_completed_interviews_band_filter(reviewed):
    high = reviewed.get("/completed-interviews", params={"band": "high"}).json()
    assert [entry["total_score"] for entry in high] == [480]
    assert high[0]["band"] == "high"
    assert high[0]["percentage"] == 80
    assert high[0]["passed"] is True

    medium = reviewed.get("/completed-interviews", params={"band": "medium"}).json()
    assert [entry["total_score"] for entry in medium] == [400]

    low = reviewed.get("/completed-interviews", params={"band": "low", "search": "sam"}).json()
    assert [entry["total_score"] for entry in low] == [320]
    assert low[0]["passed"] is False


def test_completed_interview_detail(reviewed):
    entry = reviewed.get("/completed-interviews", params={"search": "ana"}).json()[0]

    detail = reviewed.get(f"/completed-interviews/{entry['session_id']}")
    assert detail.status_code == 200
    body = detail.json()
    assert body["candidate"]["name"] == "Ana Ruiz"
    assert body["report"]["total_score"] == 400
    assert body["report"]["passed"] is True
    assert len(body["questions"]) == 6
    assert body["questions"][0]["answer"] == "answer 0"
    assert body["questions"][5]["answer"] is None

    assert reviewed.get("/completed-interviews/missing").status_code == 404


def test_candidate_interviews(reviewed):
    entry = reviewed.get("/completed-interviews", params={"search": "jane"}).json()[0]
    candidate_id = entry["candidate"]["id"]

    interviews = reviewed.get(f"/candidates/{candidate_id}/interviews").json()
    assert [i["session_id"] for i in interviews] == [entry["session_id"]]
    assert interviews[0]["total_score"] == 480

    assert reviewed.get("/candidates/missing/interviews").status_code == 404
