from typing import Dict, NamedTuple

from dispatch.template_renderer import TemplateRenderer

PRODUCT_NAME = "BannerMind"
PRODUCT_URL = "https://bannermind.in"

DEFAULT_BROADCAST_MESSAGE = """🎉 BannerMind is live!

Start creating stunning banners now with AI power.

👉 https://bannermind.vercel.app

Thank you for your patience!"""

EMAIL_SUBJECT_TEMPLATE = "🎉 {{ product_name }} is LIVE! Start Creating Amazing Banners"

EMAIL_TEXT_TEMPLATE = """Hi there!

{{ message }}

Start creating: {{ product_url }}

You are receiving this because {{ recipient_email }} signed up for the {{ product_name }} launch list."""

EMAIL_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{{ product_name }} is LIVE!</title>
</head>
<body style="margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #0d0d12;">
  <table role="presentation" style="width: 100%; max-width: 600px; margin: 0 auto; border-collapse: collapse; background: #1a1a2e; border-radius: 16px;">
    <tr>
      <td style="padding: 40px; text-align: center; background: linear-gradient(135deg, #8b5cf6 0%, #a855f7 50%, #ec4899 100%);">
        <h1 style="margin: 0; color: #ffffff; font-size: 32px;">{{ product_name }} is LIVE!</h1>
      </td>
    </tr>
    <tr>
      <td style="padding: 40px; color: #e2e8f0; font-size: 15px; line-height: 1.7;">
        {% for paragraph in paragraphs %}<p style="margin: 0 0 16px;">{{ paragraph }}</p>
        {% endfor %}
        <div style="text-align: center; margin: 30px 0;">
          <a href="{{ product_url }}" style="display: inline-block; background: #8b5cf6; color: #ffffff; font-size: 18px; font-weight: 600; text-decoration: none; padding: 16px 40px; border-radius: 10px;">Start Creating Now</a>
        </div>
      </td>
    </tr>
    <tr>
      <td style="padding: 25px 40px; text-align: center; color: #64748b; font-size: 12px;">
        Sent to {{ recipient_email }} because you joined the {{ product_name }} launch list.
      </td>
    </tr>
  </table>
</body>
</html>"""


class EmailContent(NamedTuple):
    subject: str
    html_body: str
    text_body: str


def build_email_content(
    renderer: TemplateRenderer,
    message: str,
    recipient_email: str,
    product_name: str = PRODUCT_NAME,
    product_url: str = PRODUCT_URL,
) -> EmailContent:
    """Wraps a plain broadcast message in the launch announcement email."""
    context: Dict[str, object] = {
        "message": message,
        "paragraphs": [p.strip() for p in message.split("\n\n") if p.strip()],
        "recipient_email": recipient_email,
        "product_name": product_name,
        "product_url": product_url,
    }
    return EmailContent(
        subject=renderer.render(EMAIL_SUBJECT_TEMPLATE, context),
        html_body=renderer.render(EMAIL_HTML_TEMPLATE, context, html=True),
        text_body=renderer.render(EMAIL_TEXT_TEMPLATE, context),
    )


CONFIRMATION_MESSAGE = """🚀 You're on the BannerMind launch list!

We'll let you know the moment BannerMind goes live. Stay tuned!"""

CONFIRMATION_SUBJECT_TEMPLATE = "🚀 You're on the {{ product_name }} Launch List!"

CONFIRMATION_TEXT_TEMPLATE = """Hi there!

Thank you for signing up to be notified when {{ product_name }} launches!
We're working hard to bring you the ultimate AI-powered banner creation platform.

What you'll get:
- First access when we launch
- Exclusive early-bird pricing
- Behind-the-scenes updates

Subscribed as: {{ recipient_email }}

Stay tuned for the launch!
{{ product_url }}"""

CONFIRMATION_HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>You're on the list! - {{ product_name }}</title>
</head>
<body style="margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #0d0d12;">
  <table role="presentation" style="width: 100%; max-width: 600px; margin: 0 auto; border-collapse: collapse; background: #1a1a2e; border-radius: 16px;">
    <tr>
      <td style="padding: 50px 40px 30px; text-align: center; background: linear-gradient(135deg, #8b5cf6 0%, #a855f7 50%, #ec4899 100%);">
        <h1 style="margin: 0 0 10px; color: #ffffff; font-size: 28px;">You're on the List!</h1>
        <p style="margin: 0; color: rgba(255,255,255,0.9); font-size: 16px;">{{ product_name }} launch notification confirmed</p>
      </td>
    </tr>
    <tr>
      <td style="padding: 40px; color: #94a3b8; font-size: 15px; line-height: 1.7;">
        <p style="margin: 0 0 20px; color: #e2e8f0;">Hi there! 👋</p>
        <p style="margin: 0 0 20px;">Thank you for signing up to be notified when <strong style="color: #a855f7;">{{ product_name }}</strong> launches!</p>
        <ul style="margin: 0; padding-left: 20px; font-size: 14px; line-height: 1.8;">
          <li><strong style="color: #22c55e;">First access</strong> when we launch</li>
          <li><strong style="color: #22c55e;">Exclusive early-bird pricing</strong></li>
          <li><strong style="color: #22c55e;">Behind-the-scenes updates</strong></li>
        </ul>
        <p style="margin: 20px 0 0; color: #64748b; font-size: 13px; text-align: center;">
          Subscribed as: <strong style="color: #a855f7;">{{ recipient_email }}</strong>
        </p>
      </td>
    </tr>
    <tr>
      <td style="padding: 25px 40px; text-align: center; color: #94a3b8; font-size: 14px;">
        Stay tuned for the launch! 🎉 <a href="{{ product_url }}" style="color: #a855f7;">{{ product_url }}</a>
      </td>
    </tr>
  </table>
</body>
</html>"""


def build_confirmation_content(
    renderer: TemplateRenderer,
    recipient_email: str,
    product_name: str = PRODUCT_NAME,
    product_url: str = PRODUCT_URL,
) -> EmailContent:
    context: Dict[str, object] = {
        "recipient_email": recipient_email,
        "product_name": product_name,
        "product_url": product_url,
    }
    return EmailContent(
        subject=renderer.render(CONFIRMATION_SUBJECT_TEMPLATE, context),
        html_body=renderer.render(CONFIRMATION_HTML_TEMPLATE, context, html=True),
        text_body=renderer.render(CONFIRMATION_TEXT_TEMPLATE, context),
    )
