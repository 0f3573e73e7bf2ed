"""Integration tests for the console API against an in-memory evaluation API."""

from __future__ import annotations

from fastapi import status
from fastapi.testclient import TestClient
from perfeval.libs.evaluation_api import SessionExpiredError
from tests.utils import ENGINEERING_MANAGER, auth_headers, make_record

ANA = auth_headers("user-ana", "employee")
MANAGER = auth_headers(ENGINEERING_MANAGER, "manager")
ADMIN = auth_headers("user-admin", "admin")


def test_health_reports_upstream_status(test_client: TestClient, fake_api) -> None:
    response = test_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"

    fake_api.reachable = False
    payload = test_client.get("/health").json()
    assert payload["status"] == "degraded"
    assert payload["upstream"]["evaluation_api"]["status"] == "error"


def test_missing_token_is_rejected(test_client: TestClient) -> None:
    response = test_client.get("/dashboard")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_self_evaluation_form(test_client: TestClient) -> None:
    response = test_client.get("/evaluations/ev-self/form", headers=ANA)

    assert response.status_code == 200
    data = response.json()
    assert data["targeting"]["evaluated_user_id"] == "user-ana"
    assert data["targeting"]["editable"] is False
    assert data["responses"] == {"COMMUNICATION": [3, 3], "TEAMWORK": [3, 3, 3]}
    assert [option["label"] for option in data["rating_options"]][0] == "Inadecuado"
    assert data["already_responded"] is False


def test_peer_form_lists_colleagues(test_client: TestClient) -> None:
    data = test_client.get("/evaluations/ev-peer/form", headers=ANA).json()

    assert data["targeting"]["editable"] is True
    assert [c["id"] for c in data["targeting"]["candidates"]] == ["emp-2", "emp-3"]


def test_submit_peer_record_then_block_second_attempt(test_client: TestClient, fake_api) -> None:
    body = {
        "evaluated_user_id": "user-beto",
        "responses": {"TEAMWORK": [5, 4, 5]},
        "comments": "Always helpful",
    }

    created = test_client.post("/evaluations/ev-peer/records", headers=ANA, json=body)

    assert created.status_code == status.HTTP_201_CREATED
    data = created.json()
    assert data["evaluated_user_id"] == "user-beto"
    assert [item["responses"] for item in data["results"]] == [[3, 3], [5, 4, 5]]
    assert fake_api.submitted[0].evaluator == "user-ana"

    again = test_client.post("/evaluations/ev-peer/records", headers=ANA, json=body)
    assert again.status_code == status.HTTP_409_CONFLICT

    form = test_client.get("/evaluations/ev-peer/form", headers=ANA).json()
    assert form["already_responded"] is True


def test_peer_record_without_selection_conflicts(test_client: TestClient) -> None:
    response = test_client.post("/evaluations/ev-peer/records", headers=ANA, json={})

    assert response.status_code == status.HTTP_409_CONFLICT


def test_invalid_rating_is_unprocessable(test_client: TestClient) -> None:
    response = test_client.post(
        "/evaluations/ev-self/records",
        headers=ANA,
        json={"responses": {"TEAMWORK": [6, 3, 3]}},
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_unknown_evaluation_is_not_found(test_client: TestClient) -> None:
    response = test_client.get("/evaluations/ev-nope/form", headers=ANA)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_expired_upstream_session_is_unauthorized(test_client: TestClient, fake_api) -> None:
    fake_api.failure = SessionExpiredError("Session expired. Please login again.", 401)

    response = test_client.get("/dashboard", headers=ANA)

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_manager_dashboard(test_client: TestClient, fake_api) -> None:
    fake_api.records.append(make_record("rec-1", [("TEAMWORK", 4.0)], completed=True))

    data = test_client.get("/dashboard", headers=MANAGER).json()

    assert data["role"] == "Manager"
    assert data["department"]["id"] == "dep-eng"
    assert data["completed_records"] == 1
    assert [e["id"] for e in data["available_evaluations"]] == ["ev-self", "ev-peer", "ev-mgr"]


def test_department_report_requires_author_role(test_client: TestClient) -> None:
    response = test_client.get("/reports/departments/dep-eng", headers=ANA)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_department_report_rollup(test_client: TestClient, fake_api) -> None:
    fake_api.records.extend(
        [
            make_record("rec-1", [("A", 4.0)], overall_average=4.0),
            make_record("rec-2", [("A", 2.0), ("B", 5.0)], overall_average=3.5),
        ]
    )

    data = test_client.get("/reports/departments/dep-eng", headers=MANAGER).json()

    assert data["record_count"] == 2
    assert data["overall_average"] == 3.75
    assert data["competencies"] == [
        {"competency": "A", "average": 3.0},
        {"competency": "B", "average": 2.5},
    ]


def test_evaluation_authoring_routes(test_client: TestClient, fake_api) -> None:
    listed = test_client.get("/evaluations", params={"search": "peer"}, headers=MANAGER)
    assert [e["id"] for e in listed.json()] == ["ev-peer"]

    published = test_client.patch("/evaluations/ev-draft/publish", headers=MANAGER)
    assert published.json()["published"] is True
    assert fake_api.evaluations["ev-draft"].published is True

    added = test_client.post(
        "/evaluations/ev-self/competencies/0/questions",
        headers=MANAGER,
        json={"text": "Gives useful feedback"},
    )
    assert added.json()["competencies"][0]["questions"][-1] == "Gives useful feedback"

    removed = test_client.delete(
        "/evaluations/ev-self/competencies/0/questions/9", headers=MANAGER
    )
    assert removed.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    forbidden = test_client.patch("/evaluations/ev-draft/publish", headers=ANA)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN


def test_fixed_target_rejects_other_colleague(test_client: TestClient) -> None:
    response = test_client.post(
        "/evaluations/ev-self/records",
        headers=ANA,
        json={"evaluated_user_id": "user-beto"},
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_form_reports_editing_rights_and_labels(test_client: TestClient) -> None:
    employee_form = test_client.get("/evaluations/ev-self/form", headers=ANA).json()
    manager_form = test_client.get("/evaluations/ev-self/form", headers=MANAGER).json()

    assert employee_form["can_edit"] is False
    assert manager_form["can_edit"] is True
    assert [c["label"] for c in employee_form["evaluation"]["competencies"]] == [
        "Communication",
        "Teamwork",
    ]
    assert [option["value"] for option in employee_form["rating_options"]] == [1, 2, 3, 4, 5]


def test_rating_preview(test_client: TestClient) -> None:
    response = test_client.post(
        "/evaluations/ev-self/preview",
        headers=ANA,
        json={"fill": 4, "responses": {"TEAMWORK": [1]}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["results"] == [
        {"competency": "COMMUNICATION", "responses": [4, 4], "average": 4.0},
        {"competency": "TEAMWORK", "responses": [1, 4, 4], "average": 3.0},
    ]
    assert data["overall_average"] == 3.5

    invalid = test_client.post("/evaluations/ev-self/preview", headers=ANA, json={"fill": 9})
    assert invalid.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_create_evaluation_and_list_by_department(test_client: TestClient, fake_api) -> None:
    created = test_client.post(
        "/evaluations",
        headers=MANAGER,
        json={
            "name": "  Leadership check ",
            "department_id": "dep-ops",
            "evaluation_type": "manager",
            "due_date": "2026-11-30",
        },
    )

    assert created.status_code == status.HTTP_201_CREATED
    data = created.json()
    assert data["name"] == "Leadership check"
    assert data["published"] is False
    assert data["competencies"] == [
        {"competency": "COMMUNICATION", "label": "Communication", "questions": []}
    ]

    listed = test_client.get("/evaluations", params={"department_id": "dep-ops"}, headers=MANAGER)
    assert [item["id"] for item in listed.json()] == [data["id"]]


def test_create_evaluation_rejects_bad_template(test_client: TestClient) -> None:
    base = {"name": "Review", "department_id": "dep-eng"}

    unknown_type = test_client.post(
        "/evaluations", headers=MANAGER, json={**base, "evaluation_type": "360"}
    )
    repeated = test_client.post(
        "/evaluations",
        headers=MANAGER,
        json={
            **base,
            "evaluation_type": "peer",
            "competencies": [{"competency": "TEAMWORK"}, {"competency": "TEAMWORK"}],
        },
    )
    forbidden = test_client.post(
        "/evaluations", headers=ANA, json={**base, "evaluation_type": "peer"}
    )

    assert unknown_type.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert repeated.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN


def test_competency_editing_routes(test_client: TestClient, fake_api) -> None:
    added = test_client.post("/evaluations/ev-self/competencies", headers=MANAGER, json={})
    assert [c["competency"] for c in added.json()["competencies"]] == [
        "COMMUNICATION",
        "TEAMWORK",
        "LEADERSHIP",
    ]

    repeated = test_client.post(
        "/evaluations/ev-self/competencies", headers=MANAGER, json={"category": "TEAMWORK"}
    )
    assert repeated.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    renamed = test_client.patch(
        "/evaluations/ev-self/competencies/2", headers=MANAGER, json={"category": "ADAPTABILITY"}
    )
    assert renamed.json()["competencies"][2]["competency"] == "ADAPTABILITY"

    clash = test_client.patch(
        "/evaluations/ev-self/competencies/2", headers=MANAGER, json={"category": "TEAMWORK"}
    )
    assert clash.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    removed = test_client.delete("/evaluations/ev-self/competencies/0", headers=MANAGER)
    assert [c["competency"] for c in removed.json()["competencies"]] == [
        "TEAMWORK",
        "ADAPTABILITY",
    ]
    assert [c.competency for c in fake_api.evaluations["ev-self"].competencies] == [
        "TEAMWORK",
        "ADAPTABILITY",
    ]


def test_employee_routes_are_admin_only(test_client: TestClient, fake_api) -> None:
    assert test_client.get("/employees", headers=MANAGER).status_code == 403

    listed = test_client.get("/employees", params={"department_id": "dep-ops"}, headers=ADMIN)
    assert [item["name"] for item in listed.json()] == ["Dario"]

    created = test_client.post(
        "/employees",
        headers=ADMIN,
        json={"name": " Elena ", "department_id": "dep-ops", "position": "Analyst"},
    )
    assert created.status_code == status.HTTP_201_CREATED
    employee_id = created.json()["id"]
    assert created.json()["name"] == "Elena"

    updated = test_client.put(
        f"/employees/{employee_id}",
        headers=ADMIN,
        json={"name": "Elena", "department_id": "dep-eng", "is_remote": True},
    )
    assert updated.json()["department_id"] == "dep-eng"
    assert updated.json()["is_remote"] is True

    fetched = test_client.get(f"/employees/{employee_id}", headers=ADMIN)
    assert fetched.json()["department_id"] == "dep-eng"
    assert test_client.get("/employees/emp-404", headers=ADMIN).status_code == 404


def test_register_then_login(test_client: TestClient, fake_api) -> None:
    account = {"email": "elena@example.com", "password": "secret-pw", "role": "MANAGER"}

    forbidden = test_client.post("/auth/register", headers=MANAGER, json=account)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    registered = test_client.post("/auth/register", headers=ADMIN, json=account)
    assert registered.status_code == status.HTTP_201_CREATED
    assert registered.json()["role"] == "Manager"

    again = test_client.post("/auth/register", headers=ADMIN, json=account)
    assert again.status_code == status.HTTP_409_CONFLICT

    logged_in = test_client.post(
        "/auth/login", json={"email": "elena@example.com", "password": "secret-pw"}
    )
    assert logged_in.status_code == 200
    token = logged_in.json()["access_token"]
    assert logged_in.json()["user"]["role"] == "Manager"

    me = test_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["sections"] == ["dashboard", "profile", "evaluations", "reports"]

    wrong = test_client.post(
        "/auth/login", json={"email": "elena@example.com", "password": "nope"}
    )
    assert wrong.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong.json()["detail"] == "Invalid email or password"


def test_register_rejects_unknown_role(test_client: TestClient) -> None:
    response = test_client.post(
        "/auth/register",
        headers=ADMIN,
        json={"email": "x@example.com", "password": "secret-pw", "role": "auditor"},
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
