from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .locales import format_date


@dataclass(frozen=True)
class CertificateContext:
    """Recipient and batch values available to template placeholders."""

    first_name: str = ""
    last_name: str = ""
    team_name: str = ""
    batch_name: str = ""
    start_date: date | None = None
    end_date: date | None = None
    today: date | None = None


def sample_context(today: date | None = None) -> CertificateContext:
    today = today or date.today()
    return CertificateContext(
        first_name="Firstname",
        last_name="Lastname",
        team_name="Team",
        batch_name="Batch",
        start_date=today,
        end_date=today,
        today=today,
    )


def _date_or_blank(value: date | None, locale: str, style: str) -> str:
    return format_date(value, locale, style) if value else ""


def variable_values(context: CertificateContext, locale: str) -> dict[str, str]:
    first = context.first_name or ""
    last = context.last_name or ""
    today = context.today or date.today()
    return {
        "{certificate.fullName}": f"{first} {last}",
        "{certificate.fullNameCaps}": f"{first.upper()} {last.upper()}",
        "{certificate.firstName}": first,
        "{certificate.firstNameCaps}": first.upper(),
        "{certificate.lastName}": last,
        "{certificate.lastNameCaps}": last.upper(),
        "{certificate.teamName}": context.team_name or "",
        "{batch.name}": context.batch_name or "",
        "{batch.startDate}": _date_or_blank(context.start_date, locale, "short"),
        "{batch.endDate}": _date_or_blank(context.end_date, locale, "short"),
        "{batch.signatureDate}": _date_or_blank(context.end_date, locale, "numeric"),
        "{batch.signatureDateLong}": _date_or_blank(context.end_date, locale, "long"),
        "{datetime.currentDate}": format_date(today, locale, "short"),
        "{datetime.currentMonth}": format_date(today, locale, "month"),
    }


def replace_variables(text: str, context: CertificateContext, locale: str) -> str:
    result = text or ""
    for placeholder, value in variable_values(context, locale).items():
        result = result.replace(placeholder, value)
    return result
