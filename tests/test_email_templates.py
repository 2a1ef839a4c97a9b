"""Agent email template tests."""

from datetime import date

import pytest

from fusion_edge.schemas.notification import AgentEmailRequest, AgentEmailType
from fusion_edge.services.email_templates import (
    TEMPLATES,
    InvalidEmailTypeError,
    env,
    format_amount,
    render_agent_email,
)

TODAY = date(2024, 5, 17)


def make_email(**overrides):
    data = {
        "type": "code_used",
        "agentEmail": "agent@example.com",
        "agentName": "Agent Smith",
        "schoolName": "Kilimani School",
        "schoolEmail": "info@kilimani.example",
        "schoolCountry": "Tanzania",
        "schoolRegion": "Arusha",
        "schoolDistrict": "Arusha City",
        "promoCode": "PROMO15",
    }
    data.update(overrides)
    return AgentEmailRequest.model_validate(data)


def test_code_used_email():
    subject, html = render_agent_email(make_email(), today=TODAY)

    assert subject == "🎉 Your Promo Code PROMO15 Was Used!"
    assert "Hi Agent Smith," in html
    assert "Arusha City, Arusha, Tanzania" in html
    assert "2024-05-17" in html
    assert "Project Fusion Team" in html


def test_first_order_email():
    email = make_email(type="first_order", orderAmount=250000, commission=7500, creditWorthFactor=1.5)
    subject, html = render_agent_email(email, today=TODAY)

    assert subject == "💰 Commission Earned! Kilimani School Placed Their First Order"
    assert "TZS 7,500" in html
    assert "TZS 250,000" in html
    assert "2% × 1.50x credit factor" in html


def test_template_values_are_escaped():
    _, html = render_agent_email(make_email(agentName="<script>alert(1)</script>"), today=TODAY)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_unknown_type_raises():
    with pytest.raises(InvalidEmailTypeError) as exc_info:
        render_agent_email(make_email(type="newsletter"), today=TODAY)
    assert str(exc_info.value) == "Invalid email type"


def test_format_amount():
    assert format_amount(3000.0) == "3,000"
    assert format_amount(1234.5) == "1,234.50"
    assert format_amount(None) == ""


def test_location_parts_are_escaped():
    _, html = render_agent_email(make_email(schoolDistrict="<b>Ngaramtoni</b>"), today=TODAY)
    assert "<b>Ngaramtoni</b>" not in html
    assert "&lt;b&gt;Ngaramtoni&lt;/b&gt;, Arusha, Tanzania" in html


def test_missing_optional_fields_render_empty():
    _, html = render_agent_email(make_email(schoolEmail=None, schoolDistrict=None), today=TODAY)
    assert "None" not in html
    assert "<strong>Location:</strong> Arusha, Tanzania" in html


def test_templates_autoescape_html():
    template = env.get_template(TEMPLATES[AgentEmailType.FIRST_ORDER])
    assert template.environment.autoescape(template.name) is True
