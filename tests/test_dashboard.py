def test_counts_are_scoped_to_the_caller(
    client, patron_headers, other_patron_headers, librarian_headers, admin_headers, make_book
):
    lent = make_book(isbn="1", total_copies=1, available_copies=1)
    make_book(isbn="2", total_copies=3, available_copies=3)
    first = client.post("/api/book-requests", json={"book_id": lent["id"]}, headers=patron_headers).json()
    client.post("/api/book-requests", json={"book_id": lent["id"]}, headers=other_patron_headers)
    client.patch(f"/api/book-requests/{first['id']}", json={"status": "APPROVED"}, headers=librarian_headers)

    patron = client.get("/api/dashboard/stats", headers=patron_headers).json()
    other = client.get("/api/dashboard/stats", headers=other_patron_headers).json()
    staff = client.get("/api/dashboard/stats", headers=librarian_headers).json()
    admin = client.get("/api/dashboard/stats", headers=admin_headers).json()

    assert (patron["total_titles"], patron["available_titles"]) == (2, 1)
    assert (patron["total_copies"], patron["available_copies"]) == (4, 3)
    assert (patron["pending_requests"], patron["active_loans"]) == (0, 1)
    assert (other["pending_requests"], other["active_loans"]) == (1, 0)
    assert (staff["pending_requests"], staff["active_loans"], staff["overdue_loans"]) == (1, 1, 0)
    assert "users_by_role" not in staff
    assert admin["users_by_role"] == {"ADMIN": 1, "LIBRARIAN": 1, "PATRON": 2}


def test_stats_require_authentication(client):
    assert client.get("/api/dashboard/stats").status_code == 401
