"""HTML bodies for transactional emails.

Variables listed in ``_HTML_VARS`` already hold rendered HTML (markdown
output, timezone tables) and are inserted as-is; everything else is
escaped.
"""

from html import escape
from string import Template

from oneuptime.notifications.messages import EmailTemplateType

_HTML_VARS = {"eventDescription", "statusPageDescription", "scheduledAt", "incidentDescription"}

_LAYOUT = Template(
    """<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, Helvetica, Arial, sans-serif; color: #111827;">
$logo
<h2>$heading</h2>
$body
<p style="color: #6b7280; font-size: 12px;">$footer</p>
</body>
</html>"""
)

_BODIES: dict[EmailTemplateType, tuple[str, str, str]] = {
    EmailTemplateType.SUBSCRIBER_SCHEDULED_MAINTENANCE_EVENT_CREATED: (
        "Scheduled Maintenance - $statusPageName",
        """<h3>$eventTitle</h3>
$eventDescription
<p><strong>Scheduled at:</strong></p>
$scheduledAt
<p><strong>Resources Affected:</strong> $resourcesAffected</p>
<p><a href="$statusPageUrl">View Status Page</a></p>""",
        'To update notification preferences or unsubscribe, <a href="$unsubscribeUrl">click here</a>.',
    ),
    EmailTemplateType.SUBSCRIBER_INCIDENT_CREATED: (
        "Incident - $statusPageName",
        """<h3>$incidentTitle</h3>
<p><strong>Resources Affected:</strong> $resourcesAffected</p>
<p><a href="$statusPageUrl">View Status Page</a></p>""",
        'To update notification preferences or unsubscribe, <a href="$unsubscribeUrl">click here</a>.',
    ),
    EmailTemplateType.STATUS_PAGE_OWNER_ADDED: (
        "You have been added as the owner of $statusPageName",
        """<p>Project: <strong>$projectName</strong></p>
<p>Status page: <strong>$statusPageName</strong></p>
$statusPageDescription
<p><a href="$statusPageViewLink">View status page in the dashboard</a></p>""",
        "To unsubscribe from this notification go to User Settings in OneUptime Dashboard.",
    ),
    EmailTemplateType.INCIDENT_CREATED: (
        "New incident on $monitorName",
        """<p>$message</p>
<p><a href="$incidentViewLink">View incident in the dashboard</a></p>""",
        "To unsubscribe from this notification go to User Settings in OneUptime Dashboard.",
    ),
}


def render_email(template_type: EmailTemplateType, variables: dict[str, str]) -> str:
    heading, body, footer = _BODIES[template_type]
    values = {
        key: value if key in _HTML_VARS else escape(value)
        for key, value in variables.items()
    }
    logo_url = values.get("logoUrl", "")
    logo = f'<img src="{logo_url}" alt="logo" style="max-height: 48px;" />' if logo_url else ""
    return _LAYOUT.substitute(
        logo=logo,
        heading=Template(heading).safe_substitute(values),
        body=Template(body).safe_substitute(values),
        footer=Template(footer).safe_substitute(values),
    )
