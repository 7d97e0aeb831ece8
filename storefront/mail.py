"""
Outbound e-mail for the password-reset flow.

Templates are rendered with Jinja2 (autoescaped); delivery goes through
``smtplib`` on a worker thread so the event loop is never blocked by the
SMTP conversation. SMTP failures propagate to the caller: a reset request
whose mail could not be sent is reported as failed, not silently dropped.
"""
import asyncio
import logging
import smtplib
from email.message import EmailMessage

from jinja2 import Environment, select_autoescape

logger = logging.getLogger(__name__)

_env = Environment(autoescape=select_autoescape(default=True))

NICE_EMAIL_TEMPLATE = _env.from_string(
    """\
<div class="email" style="
    border: 1px solid black;
    padding: 20px;
    font-family: sans-serif;
    line-height: 2;
    font-size: 20px;
">
    <h2>Hello There!</h2>
    <p>{{ text }}</p>
    {% if link %}<p><a href="{{ link }}">{{ link_label }}</a></p>{% endif %}
    <p>Cheers, {{ signature }}</p>
</div>
"""
)


def make_a_nice_email(text: str, link: str | None = None, link_label: str = "Click Here") -> str:
    return NICE_EMAIL_TEMPLATE.render(
        text=text, link=link, link_label=link_label, signature="The Storefront Team"
    )


class Mailer:
    """SMTP mailer with a fixed sender address."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content("This message requires an HTML-capable mail client.")
        msg.add_alternative(html, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, html: str) -> None:
        msg = self._build_message(to, subject, html)
        await asyncio.to_thread(self._deliver, msg)
        logger.info("Mail %r sent to %s", subject, to)

    async def send_password_reset(self, to: str, reset_url: str) -> None:
        html = make_a_nice_email(
            "Your Password Reset Token is Here!",
            link=reset_url,
            link_label="Click Here to Reset",
        )
        await self.send(to, "Your Password Reset Token", html)
