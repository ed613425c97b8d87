# Notification content rendered for operators; nothing here sends mail

from typing import NamedTuple

APP_NAME = "Mammoth ReServe"

APPROVAL_SUBJECT = f"Your {APP_NAME} Account is Approved!"

APPROVAL_BODY = """Hello {name},

Your request for the {app} app was accepted. You are now eligible to reserve food donations, and pick them up following the donor instructions.

Here is your contact information:

email: {email}
password: {password}

We are pleased to help your food needs and our community!

{app} Team"""


class EmailContent(NamedTuple):
    to: str
    subject: str
    body: str

    def to_dict(self):
        return self._asdict()


def generate_approval_email_content(display_name: str, email: str, password: str) -> EmailContent:
    """
    Render the welcome email shown to staff after approving an account.

    Args:
        display_name: group name or food bank manager name
        email: account email, used as recipient
        password: temporary password chosen by staff

    Returns:
        EmailContent(to, subject, body)
    """
    body = APPROVAL_BODY.format(name=display_name, app=APP_NAME, email=email, password=password)
    return EmailContent(to=email, subject=APPROVAL_SUBJECT, body=body)


def fallback_alert_message(food_item: str, servings: int) -> str:
    """Alert text used whenever the alert generator is unavailable"""
    return f"Alert: {servings} servings of {food_item} are available for pickup now!"
