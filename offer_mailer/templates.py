"""
Offer Template Repository

This module contains the offer letter, email body and subject templates plus the
shared rendering context used by both the PDF letter and the email.
"""

from enum import Enum
from functools import lru_cache
from typing import Mapping, Optional

from jinja2 import Template, TemplateError

from .config import MailerConfig, get_config
from .exceptions import RenderError


class TemplateType(str, Enum):
    """Available offer templates"""
    OFFER_LETTER = "offer_letter"
    OFFER_EMAIL = "offer_email"
    OFFER_SUBJECT = "offer_subject"


LETTER_HEADING = "Letter of Intent"

LETTER_FOOTER = [
    "*Since this is a digitally generated document, signature and stamp are not required.",
    "*Appointment letter containing details about CTC will be handed over to you on joining the plant",
]

COORDINATOR_FALLBACK = (
    "The location of the plant and its coordinators contact details "
    "will be shared with you near to the date of joining."
)


# Letter bodies use ReportLab paragraph markup. Paragraphs are separated by
# blank lines; a paragraph whose lines all start with a bullet becomes a list.
TEMPLATE_REPOSITORY = {
    TemplateType.OFFER_LETTER: """Dear <b>{{ name }}</b>

This is with reference to your application and subsequent interview you had with us. We have pleasure in offering you an appointment as <b>{{ position }}</b> in our organization on the terms and conditions as discussed and agreed mutually at the time of interview.

You are advised to join your duties on <b>{{ start_date }}</b> as per below mentioned details:-

{% if show_coordinator_details %}
The Name of the {{ company_name }} coordinator along with their contact number is mentioned below:

Name: <b>{{ coordinator }}</b><br/>Mobile: <b>{{ coordinator_contact }}</b>{% if location %}<br/>{{ location }}{% endif %}

{% else %}
""" + COORDINATOR_FALLBACK + """

{% endif %}
You are also advised to submit the following original documents along with one set of photocopy of certificates to us at the earliest or latest at the time of joining the duties:

• Copies of educational &amp; professional certificates
• Four recent passport size photographs, Pan No and address proof.

This appointment is subject to your being found medically fit, a positive background verification check and terms as agreed at the time of interview.

Please intimate your acceptance by signing and returning the duplicate copy of the letter.

We look forward to having you among us in {{ company_name }}.""",

    TemplateType.OFFER_EMAIL: """Dear {{ name }},<br><br>
We are delighted to inform you that you have been selected for the position of <b>{{ position }}</b> in {{ company_name }}.<br><br>
Further, the Appointment letter will be issued to you on the date of joining the {{ company_name }} plant, which will contain the entire break up of your salary structure.<br><br>
<b>Your official Start Date will be {{ start_date }}</b><br><br>
{% if show_coordinator_details %}
The Name of the {{ company_name }} coordinator along with their contact number is mentioned below:<br><br>
Name: {{ coordinator }}<br>
Mobile: {{ coordinator_contact }}<br>
{% if location %}{{ location }}<br>{% endif %}<br>
{% else %}
""" + COORDINATOR_FALLBACK + """<br><br>
{% endif %}
Please feel free to call me at {{ signatory_phone }} or write to me at {{ mail_from }} in case you have any doubts or clarification.<br><br>
All the best for a successful career with {{ company_name }}!<br><br>
Thanks and Regards,<br>
{{ signatory_name }}<br>
{{ signatory_phone }}""",

    TemplateType.OFFER_SUBJECT: "Congratulations! Selected for {{ position }} at {{ company_name }}",
}

# Subjects are plain header text, everything else is markup
_PLAIN_TEXT_TEMPLATES = {TemplateType.OFFER_SUBJECT}


def get_template_content(template_type: TemplateType) -> str:
    """Get template source by type"""
    if template_type not in TEMPLATE_REPOSITORY:
        raise RenderError(
            f"Invalid template type: {template_type}. Available types: {[t.value for t in TemplateType]}"
        )
    return TEMPLATE_REPOSITORY[template_type]


@lru_cache(maxsize=None)
def _compile_template(template_type: TemplateType) -> Template:
    return Template(
        get_template_content(template_type),
        autoescape=template_type not in _PLAIN_TEXT_TEMPLATES,
    )


def _clean(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def should_show_coordinator_details(row: Mapping) -> bool:
    """True only when both the coordinator name and contact are non-empty"""
    return bool(_clean(row.get('coordinator'))) and bool(_clean(row.get('coordinator_contact')))


def build_letter_context(row: Mapping, config: Optional[MailerConfig] = None) -> dict:
    """
    Build the rendering context shared by the letter and email templates

    Args:
        row: Roster row or generated letter fields
        config: Configuration supplying branding and sender details

    Returns:
        Template context dictionary
    """
    config = config or get_config()
    return {
        'name': _clean(row.get('name')),
        'position': _clean(row.get('position')),
        'start_date': _clean(row.get('start_date')),
        'email': _clean(row.get('email')),
        'coordinator': _clean(row.get('coordinator')),
        'coordinator_contact': _clean(row.get('coordinator_contact')),
        'location': _clean(row.get('location')),
        'show_coordinator_details': should_show_coordinator_details(row),
        'company_name': config.company_name,
        'signatory_name': config.signatory_name,
        'signatory_phone': config.signatory_phone,
        'mail_from': config.mail_from,
    }


def render_template(template_type: TemplateType, context: dict) -> str:
    """
    Render a repository template with the provided context

    Raises:
        RenderError: If the template fails to render
    """
    try:
        return _compile_template(template_type).render(**context).strip()
    except TemplateError as e:
        raise RenderError(f"Error rendering {template_type.value} template: {e}") from e


def render_letter_body(context: dict) -> str:
    return render_template(TemplateType.OFFER_LETTER, context)


def render_email_body(context: dict) -> str:
    return render_template(TemplateType.OFFER_EMAIL, context)


def render_email_subject(context: dict) -> str:
    return render_template(TemplateType.OFFER_SUBJECT, context)
