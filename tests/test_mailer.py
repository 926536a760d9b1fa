from app.extensions import mail
from app.utils.mailer import send_email


def test_send_email_renders_both_bodies(app):
    with app.test_request_context(), mail.record_messages() as outbox:
        sent = send_email(
            to="ann@example.com",
            subject="Verify Your Email",
            template="verify_email",
            name="Ann",
            verify_link="http://client/verify-email?token=abc"
        )

    assert sent is True
    assert len(outbox) == 1
    msg = outbox[0]
    assert msg.recipients == ["ann@example.com"]
    assert "http://client/verify-email?token=abc" in msg.body
    assert "http://client/verify-email?token=abc" in msg.html
    assert "Ann" in msg.body


def test_send_email_skips_sender_address(app):
    sender = app.config["MAIL_DEFAULT_SENDER"]
    with app.test_request_context(), mail.record_messages() as outbox:
        sent = send_email(to=sender, subject="x", template="verify_email", name="A", verify_link="l")

    assert sent is False
    assert outbox == []
