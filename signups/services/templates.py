"""Confirmation email bodies."""
from __future__ import annotations

from html import escape

from .emailer import OutboundEmail

COMPETITION_NAME = "BridgeMind 1,000 Subscriber Coding Competition"
COMPETITION_FACTS = (
    ("Deadline", "Sunday, August 10 at 11:59 PM ET"),
    ("Results", "August 11 (community vote)"),
    ("Prize", "$50 Visa gift card"),
)

_WRAPPER = '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">{body}</div>'
_FOOTER = (
    '<hr style="border: none; border-top: 1px solid #eee; margin: 30px 0;">'
    '<p style="color: #666; font-size: 12px;">{reason}</p>'
)


def _facts_text() -> str:
    return "\n".join(f"{label}: {value}" for label, value in COMPETITION_FACTS)


def _facts_html() -> str:
    items = "".join(f"<li><strong>{label}:</strong> {escape(value)}</li>" for label, value in COMPETITION_FACTS)
    return f'<ul style="line-height: 1.8;">{items}</ul>'


def beta_welcome(email: str) -> OutboundEmail:
    text = (
        "Thanks for requesting BridgeMind beta access!\n\n"
        "You're on the list. We'll reach out as soon as your spot opens up."
    )
    body = (
        '<h2 style="color: #333;">You\'re on the list!</h2>'
        "<p>Thanks for requesting <strong>BridgeMind</strong> beta access.</p>"
        "<p>We'll reach out as soon as your spot opens up.</p>"
        + _FOOTER.format(reason="You're receiving this email because you signed up for the BridgeMind beta.")
    )
    return OutboundEmail(to=email, subject="You're on the BridgeMind beta list", text=text, html=_WRAPPER.format(body=body))


def competition_confirmation(email: str) -> OutboundEmail:
    text = (
        "Thanks for entering the BridgeMind coding competition!\n\n"
        f"{_facts_text()}\n\n"
        "We'll email more instructions soon. Good luck!"
    )
    body = (
        '<h2 style="color: #333;">Welcome to the Competition!</h2>'
        f"<p>Thanks for entering the <strong>{COMPETITION_NAME}</strong>!</p>"
        + _facts_html()
        + "<p>We'll email more instructions soon. Good luck!</p>"
        + _FOOTER.format(
            reason="You're receiving this email because you signed up for the BridgeMind coding competition."
        )
    )
    return OutboundEmail(
        to=email,
        subject=f"You're in! {COMPETITION_NAME}",
        text=text,
        html=_WRAPPER.format(body=body),
    )


def submission_confirmation(email: str, project_url: str, project_title: str | None) -> OutboundEmail:
    title = project_title or "Untitled Project"
    text = (
        f"Thank you for submitting your project to the {COMPETITION_NAME}!\n\n"
        "Project Details:\n"
        f"- Title: {title}\n"
        f"- URL: {project_url}\n\n"
        f"{_facts_text()}\n\n"
        "We've received your submission and will review it. Good luck!\n\n"
        "Important: Make sure your project is accessible at the provided URL until the competition ends."
    )
    safe_url = escape(project_url, quote=True)
    body = (
        '<h2 style="color: #333;">Competition Submission Received!</h2>'
        f"<p>Thank you for submitting your project to the <strong>{COMPETITION_NAME}</strong>!</p>"
        '<div style="background: #f5f5f5; padding: 15px; border-radius: 8px; margin: 20px 0;">'
        '<h3 style="margin-top: 0;">Project Details:</h3>'
        '<ul style="line-height: 1.8;">'
        f"<li><strong>Title:</strong> {escape(title)}</li>"
        f'<li><strong>URL:</strong> <a href="{safe_url}" style="color: #0066cc;">{safe_url}</a></li>'
        "</ul></div>"
        + _facts_html()
        + '<p style="color: #666;"><strong>Important:</strong> Make sure your project remains accessible '
        "at the provided URL until the competition ends.</p>"
        "<p>Good luck!</p>"
        + _FOOTER.format(
            reason="You're receiving this email because you submitted a project to the BridgeMind coding competition."
        )
    )
    return OutboundEmail(
        to=email,
        subject="Competition Submission Received - BridgeMind 1,000 Subscriber Competition",
        text=text,
        html=_WRAPPER.format(body=body),
    )


def goalpost_beta_ack(email: str, platform: str) -> OutboundEmail:
    label = platform.upper()
    text = f"Thanks for joining the GoalPost beta on {platform}.\n\nWe'll email TestFlight/Google Play instructions shortly."
    html = (
        f"<p>Thanks for joining the <strong>GoalPost</strong> beta on {label}.</p>"
        "<p>We'll email TestFlight/Google Play instructions shortly.</p>"
    )
    return OutboundEmail(to=email, subject=f"You're in! GoalPost Beta ({label})", text=text, html=html)
