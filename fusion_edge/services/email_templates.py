"""HTML templates for agent emails."""

from datetime import date
from typing import Optional, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from fusion_edge.exceptions import FusionError
from fusion_edge.schemas.notification import AgentEmailRequest, AgentEmailType


class InvalidEmailTypeError(FusionError):
    """Unknown agent email template."""

    def __init__(self, email_type: str):
        super().__init__("Invalid email type", details={"type": email_type})


def format_amount(value: Optional[float]) -> str:
    """Thousands-separated amount, dropping a zero fraction."""
    if value is None:
        return ""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def _factor(value: Optional[float]) -> str:
    return f"{value if value is not None else 1.0:.2f}"


env = Environment(
    loader=PackageLoader("fusion_edge", "templates"),
    autoescape=select_autoescape(["html"]),
)
env.filters["amount"] = format_amount

TEMPLATES = {
    AgentEmailType.CODE_USED: "email/code_used.html",
    AgentEmailType.FIRST_ORDER: "email/first_order.html",
}


def render_code_used(email: AgentEmailRequest, today: date) -> Tuple[str, str]:
    subject = f"🎉 Your Promo Code {email.promo_code or ''} Was Used!"
    location = [part for part in (email.school_district, email.school_region, email.school_country) if part]
    html = env.get_template(TEMPLATES[AgentEmailType.CODE_USED]).render(
        email=email, location=location, today=today,
    )
    return subject, html


def render_first_order(email: AgentEmailRequest, today: date, currency: str = "TZS") -> Tuple[str, str]:
    subject = f"💰 Commission Earned! {email.school_name} Placed Their First Order"
    html = env.get_template(TEMPLATES[AgentEmailType.FIRST_ORDER]).render(
        email=email, factor=_factor(email.credit_worth_factor), currency=currency, today=today,
    )
    return subject, html


def render_agent_email(
    email: AgentEmailRequest,
    today: Optional[date] = None,
    currency: str = "TZS",
) -> Tuple[str, str]:
    """
    Render subject and HTML body for an agent email.

    Raises:
        InvalidEmailTypeError: If ``email.type`` is not a known template
    """
    today = today or date.today()
    if email.type == AgentEmailType.CODE_USED:
        return render_code_used(email, today)
    if email.type == AgentEmailType.FIRST_ORDER:
        return render_first_order(email, today, currency)
    raise InvalidEmailTypeError(email.type)
