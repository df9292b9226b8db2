"""
MJML Email Templates
Templates for client-facing emails, compiled to responsive HTML at send time
"""

from html import escape
from typing import Optional

from .config import APP_NAME

# App theme colors - Navy/Amber color scheme
THEME = {
    "primary": "#1e3a8a",
    "primary_dark": "#1e40af",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "accent": "#f59e0b",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    footer_note: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    footer_notice = ""
    if footer_note:
        footer_notice = f"""
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          {footer_note}
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="20px" font-weight="700" color="#ffffff" padding="0">
              {APP_NAME}
            </mj-text>
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              Sent by your insurance agent via {APP_NAME}.
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def appointment_confirmation_template(
    client_name: str,
    title: str,
    formatted_time: str,
    location: Optional[str] = None,
) -> str:
    """Appointment scheduled notification for the client"""
    content = f"""
    <mj-text>
      Hi {escape(client_name)},
    </mj-text>

    <mj-text>
      Your appointment "<strong>{escape(title)}</strong>" has been scheduled for:
    </mj-text>

    <mj-text align="center" font-size="18px" font-weight="600" color="{THEME['primary']}" padding="20px 0 8px 0">
      📅 {escape(formatted_time)}
    </mj-text>

    <mj-text align="center" font-size="16px" color="{THEME['text_primary']}" padding="0 0 20px 0">
      📍 {escape(location or "Not specified")}
    </mj-text>

    <mj-text>
      Thank you!
    </mj-text>
    """

    return get_base_template(
        title="Appointment Confirmation",
        preview_text=f"Appointment Confirmation - {APP_NAME}",
        content_sections=content,
        footer_note="Please contact your agent if you need to reschedule.",
    )
