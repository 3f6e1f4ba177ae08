from datetime import datetime, timedelta

import pytest

from conftest import PASSWORD, login


def request_book(client, headers, book_id):
    return client.post("/api/book-requests", json={"book_id": book_id}, headers=headers)


def process(client, headers, request_id, status, notes=None):
    body = {"status": status}
    if notes is not None:
        body["notes"] = notes
    return client.patch(f"/api/book-requests/{request_id}", json=body, headers=headers)


def copies(client, book_id):
    return client.get(f"/api/books/{book_id}").json()["available_copies"]


def loans(client, headers):
    return client.get("/api/transactions", headers=headers).json()


def test_patron_creates_pending_request_without_taking_a_copy(client, patron_headers, make_book):
    book = make_book(total_copies=1, available_copies=1)

    response = request_book(client, patron_headers, book["id"])

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["book"]["id"] == book["id"]
    assert data["user"]["email"] == "patron@library.org"
    assert data["user"]["library_card_number"].startswith("LIB-")
    assert data["librarian"] is None
    assert copies(client, book["id"]) == 1


def test_only_patrons_create_requests(client, librarian_headers, make_book):
    book = make_book()

    assert client.post("/api/book-requests", json={"book_id": book["id"]}).status_code == 401
    assert request_book(client, librarian_headers, book["id"]).status_code == 403


def test_request_for_missing_or_unavailable_book(client, patron_headers, make_book):
    book = make_book(available_copies=0)

    missing = request_book(client, patron_headers, 999)
    unavailable = request_book(client, patron_headers, book["id"])

    assert missing.status_code == 404
    assert unavailable.status_code == 400
    assert unavailable.json()["error"]["message"] == "Book is not available for request"


def test_duplicate_pending_request_is_refused(client, patron_headers, make_book):
    book = make_book()
    request_book(client, patron_headers, book["id"])

    response = request_book(client, patron_headers, book["id"])

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "You already have a pending request for this book"


def test_approval_takes_one_copy_and_opens_a_fourteen_day_loan(
    client, patron_headers, librarian_headers, make_book
):
    book = make_book(total_copies=3, available_copies=3)
    request_id = request_book(client, patron_headers, book["id"]).json()["id"]

    response = process(client, librarian_headers, request_id, "APPROVED")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "APPROVED"
    assert data["librarian"]["email"] == "librarian@library.org"
    assert data["processed_at"] is not None
    assert copies(client, book["id"]) == 2

    [loan] = loans(client, librarian_headers)
    assert loan["status"] == "ACTIVE"
    assert loan["book_request_id"] == request_id
    processed_at = datetime.fromisoformat(data["processed_at"])
    assert datetime.fromisoformat(loan["due_date"]) - processed_at == timedelta(days=14)


def test_rejection_keeps_notes_and_copies(client, patron_headers, librarian_headers, make_book):
    book = make_book(total_copies=1, available_copies=1)
    request_id = request_book(client, patron_headers, book["id"]).json()["id"]

    response = process(client, librarian_headers, request_id, "REJECTED", notes="Reserved for class use")

    assert response.json()["status"] == "REJECTED"
    assert response.json()["notes"] == "Reserved for class use"
    assert copies(client, book["id"]) == 1
    assert loans(client, librarian_headers) == []


def test_patch_rejects_pending_as_target_status(client, patron_headers, librarian_headers, make_book):
    book = make_book()
    request_id = request_book(client, patron_headers, book["id"]).json()["id"]

    assert process(client, librarian_headers, request_id, "PENDING").status_code == 400
    assert process(client, librarian_headers, request_id, "LOST").status_code == 400


def test_patrons_cannot_process_requests(client, patron_headers, make_book):
    book = make_book()
    request_id = request_book(client, patron_headers, book["id"]).json()["id"]

    response = process(client, patron_headers, request_id, "APPROVED")

    assert response.status_code == 403
    assert client.get(f"/api/book-requests/{request_id}", headers=patron_headers).json()["status"] == "PENDING"


def test_processing_unknown_request_is_404(client, librarian_headers):
    assert process(client, librarian_headers, 999, "APPROVED").status_code == 404


def test_scenario_last_copy_goes_to_first_approval(
    client, librarian_headers, patron_headers, other_patron_headers, make_book
):
    book = make_book(total_copies=1, available_copies=1)
    first = request_book(client, patron_headers, book["id"]).json()["id"]
    second = request_book(client, other_patron_headers, book["id"]).json()["id"]

    assert process(client, librarian_headers, first, "APPROVED").status_code == 200
    assert copies(client, book["id"]) == 0

    refused = process(client, librarian_headers, second, "APPROVED")

    assert refused.status_code == 400
    assert refused.json()["error"]["message"] == "Book is no longer available"
    assert client.get(f"/api/book-requests/{second}", headers=librarian_headers).json()["status"] == "PENDING"
    assert copies(client, book["id"]) == 0
    assert len(loans(client, librarian_headers)) == 1
    # The stranded request can still be rejected
    assert process(client, librarian_headers, second, "REJECTED").status_code == 200


def test_scenario_patron_cancels_own_pending_request(client, patron_headers, librarian_headers, make_book):
    book = make_book(total_copies=2, available_copies=2)
    pending = request_book(client, patron_headers, book["id"]).json()["id"]

    response = client.delete(f"/api/book-requests/{pending}", headers=patron_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Book request cancelled successfully"
    cancelled = client.get(f"/api/book-requests/{pending}", headers=patron_headers).json()
    assert cancelled["status"] == "CANCELLED"
    assert cancelled["processed_at"] is not None
    assert cancelled["librarian"] is None
    assert copies(client, book["id"]) == 2

    approved = request_book(client, patron_headers, book["id"]).json()["id"]
    process(client, librarian_headers, approved, "APPROVED")

    refused = client.delete(f"/api/book-requests/{approved}", headers=patron_headers)

    assert refused.status_code == 400
    assert refused.json()["error"]["message"] == "Only pending requests can be cancelled"
    assert copies(client, book["id"]) == 1


def test_staff_can_cancel_any_pending_request(client, patron_headers, librarian_headers, make_book):
    book = make_book()
    by_delete = request_book(client, patron_headers, book["id"]).json()["id"]

    assert client.delete(f"/api/book-requests/{by_delete}", headers=librarian_headers).status_code == 200
    cancelled = client.get(f"/api/book-requests/{by_delete}", headers=librarian_headers).json()
    assert cancelled["librarian"]["email"] == "librarian@library.org"

    by_patch = request_book(client, patron_headers, book["id"]).json()["id"]
    response = process(client, librarian_headers, by_patch, "CANCELLED", notes="Duplicate")

    assert response.json()["status"] == "CANCELLED"
    assert response.json()["librarian"]["email"] == "librarian@library.org"
    assert copies(client, book["id"]) == 2


def terminal_request(client, patron_headers, librarian_headers, book_id, status):
    request_id = request_book(client, patron_headers, book_id).json()["id"]
    if status == "CANCELLED":
        client.delete(f"/api/book-requests/{request_id}", headers=patron_headers)
    else:
        process(client, librarian_headers, request_id, status)
    return request_id


@pytest.mark.parametrize("terminal", ["APPROVED", "REJECTED", "CANCELLED"])
def test_terminal_states_never_change(client, patron_headers, librarian_headers, admin_headers, make_book, terminal):
    book = make_book(total_copies=5, available_copies=5)
    request_id = terminal_request(client, patron_headers, librarian_headers, book["id"], terminal)
    available = copies(client, book["id"])

    for headers in (librarian_headers, admin_headers):
        for target in ("APPROVED", "REJECTED", "CANCELLED"):
            response = process(client, headers, request_id, target)
            assert response.status_code == 400
            assert response.json()["error"]["message"] == "Book request has already been processed"
    assert client.delete(f"/api/book-requests/{request_id}", headers=patron_headers).status_code == 400
    assert client.delete(f"/api/book-requests/{request_id}", headers=admin_headers).status_code == 400

    final = client.get(f"/api/book-requests/{request_id}", headers=patron_headers).json()
    assert final["status"] == terminal
    assert copies(client, book["id"]) == available


def test_patrons_cannot_touch_each_others_requests(
    client, patron_headers, other_patron_headers, make_book
):
    book = make_book()
    request_id = request_book(client, patron_headers, book["id"]).json()["id"]

    assert client.get(f"/api/book-requests/{request_id}", headers=other_patron_headers).status_code == 403
    assert process(client, other_patron_headers, request_id, "CANCELLED").status_code == 403
    assert client.delete(f"/api/book-requests/{request_id}", headers=other_patron_headers).status_code == 403
    assert client.get(f"/api/book-requests/{request_id}", headers=patron_headers).json()["status"] == "PENDING"


def test_unknown_request_is_404(client, patron_headers):
    assert client.get("/api/book-requests/999", headers=patron_headers).status_code == 404
    assert client.delete("/api/book-requests/999", headers=patron_headers).status_code == 404


def test_listing_is_scoped_by_role(client, patron_headers, other_patron_headers, librarian_headers, make_book):
    first_book = make_book(isbn="1")
    second_book = make_book(isbn="2")
    mine = request_book(client, patron_headers, first_book["id"]).json()
    theirs = request_book(client, other_patron_headers, first_book["id"]).json()
    newest = request_book(client, patron_headers, second_book["id"]).json()
    process(client, librarian_headers, mine["id"], "REJECTED")

    own = client.get("/api/book-requests", headers=patron_headers).json()
    # A patron's user_id filter cannot widen the scope
    spoofed = client.get(
        "/api/book-requests", params={"user_id": theirs["user_id"]}, headers=patron_headers
    ).json()
    everything = client.get("/api/book-requests", headers=librarian_headers).json()
    pending = client.get("/api/book-requests", params={"status": "PENDING"}, headers=librarian_headers).json()
    by_user = client.get(
        "/api/book-requests", params={"user_id": theirs["user_id"]}, headers=librarian_headers
    ).json()

    assert [r["id"] for r in own] == [newest["id"], mine["id"]]
    assert [r["id"] for r in spoofed] == [newest["id"], mine["id"]]
    assert [r["id"] for r in everything] == [newest["id"], theirs["id"], mine["id"]]
    assert {r["id"] for r in pending} == {newest["id"], theirs["id"]}
    assert [r["id"] for r in by_user] == [theirs["id"]]


def test_listing_requires_authentication(client):
    assert client.get("/api/book-requests").status_code == 401


def test_admin_processes_requests_too(client, patron_headers, admin_headers, make_book):
    book = make_book()
    request_id = request_book(client, patron_headers, book["id"]).json()["id"]

    response = process(client, admin_headers, request_id, "APPROVED")

    assert response.status_code == 200
    assert response.json()["librarian"]["email"] == "admin@library.org"
    assert copies(client, book["id"]) == 1


def test_patron_can_request_right_after_verifying(client, mailer, make_book):
    book = make_book()
    user_id = client.post(
        "/api/users/register", json={"name": "Lena", "email": "late@x.com", "password": PASSWORD}
    ).json()["user_id"]
    client.post("/api/users/verify-otp", json={"user_id": user_id, "code": mailer.last_code("late@x.com")})
    headers = login(client, "late@x.com")

    response = request_book(client, headers, book["id"])

    assert response.status_code == 201
    assert response.json()["user_id"] == user_id
