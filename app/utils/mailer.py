from flask import current_app, render_template
from flask_mail import Message
from app.extensions import mail

EMAIL_TEMPLATE_DIR = "emails"


def render_email(template, **context):
    """Render the text and HTML bodies of emails/<template>.{txt,html}."""
    text_body = render_template(f"{EMAIL_TEMPLATE_DIR}/{template}.txt", **context)
    html_body = render_template(f"{EMAIL_TEMPLATE_DIR}/{template}.html", **context)
    return text_body, html_body


def send_email(to, subject, template, **context):
    """
    Send a templated email to a single address.

    Mail addressed to the configured sender itself is not sent.

    Returns:
        bool: True if the message was handed to the mail server
    Raises:
        smtplib.SMTPException / OSError when the server rejects or is unreachable
    """
    sender = current_app.config.get("MAIL_DEFAULT_SENDER")
    if to.strip().lower() == (sender or "").strip().lower():
        current_app.logger.info(f"Not mailing the sender address {sender}")
        return False

    text_body, html_body = render_email(template, **context)
    msg = Message(subject=subject, recipients=[to], sender=sender, body=text_body, html=html_body)
    mail.send(msg)

    current_app.logger.info(f"Sent '{template}' email to {to}")
    return True
