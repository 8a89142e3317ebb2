def _send(client, sender, recipient, text="Hello", **extra):
    return client.post(
        "/api/messages",
        json=dict(recipient_id=recipient["id"], message_text=text, **extra),
        headers=sender["headers"]
    )


def test_message_delivery_and_notification(client, company, student, application):
    response = _send(client, company, student, "Can you start in May?", subject="Start date",
                     related_to="application", related_id=application["id"])
    assert response.status_code == 201, response.text
    message = response.json()
    assert message["is_read"] is False
    assert message["sender_id"] == company["id"]

    inbox = client.get("/api/messages", headers=student["headers"]).json()
    assert [m["id"] for m in inbox] == [message["id"]]
    sent = client.get("/api/messages", params={"box": "sent"}, headers=company["headers"]).json()
    assert [m["id"] for m in sent] == [message["id"]]

    notifications = client.get("/api/notifications", headers=student["headers"]).json()
    assert notifications[0]["type"] == "message"
    assert notifications[0]["related_id"] == message["id"]
    assert notifications[0]["content"] == "Start date"


def test_student_can_write_to_company_they_applied_to(client, company, student, application):
    assert _send(client, student, company, "Thanks for considering me").status_code == 201


def test_conversation_and_read_state(client, company, student, application):
    first = _send(client, company, student, "First").json()
    _send(client, student, company, "Reply")

    thread = client.get(f"/api/messages/conversation/{company['id']}", headers=student["headers"]).json()
    assert [m["message_text"] for m in thread] == ["First", "Reply"]

    url = f"/api/messages/{first['id']}/read"
    # Only the recipient marks a message read
    assert client.post(url, headers=company["headers"]).json() == {"updated": False}
    assert client.post(url, headers=student["headers"]).json() == {"updated": True}
    assert client.post(url, headers=student["headers"]).json() == {"updated": False}

    unread = client.get("/api/messages", params={"unread_only": "true"}, headers=student["headers"]).json()
    assert unread == []


def test_empty_message_rejected(client, admin, student):
    response = _send(client, admin, student, "")
    assert response.status_code == 422
