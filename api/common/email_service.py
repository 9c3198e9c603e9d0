"""
Email service for sending employee account credentials.
"""
import os
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from jinja2 import Template

CREDENTIALS_TEMPLATE = Template("""
<html>
<body>
    <h2>Bem-vindo ao painel BV Celular!</h2>

    {% if employee_name %}
    <p>Olá {{ employee_name }},</p>
    {% else %}
    <p>Olá,</p>
    {% endif %}

    <p>Sua conta de funcionário foi criada. Estes são seus dados de acesso:</p>

    <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
        <p><strong>Email:</strong> {{ email }}</p>
        <p><strong>Senha:</strong> {{ password }}</p>
    </div>

    <p><strong>Importante:</strong> altere sua senha no primeiro acesso.</p>

    <p>Equipe BV Celular</p>
</body>
</html>
""")


class EmailService:
    def __init__(self):
        self.smtp_server = os.getenv("SMTP_SERVER", "smtp.gmail.com")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_username = os.getenv("SMTP_USERNAME")
        self.smtp_password = os.getenv("SMTP_PASSWORD")
        self.from_email = os.getenv("FROM_EMAIL", self.smtp_username)

    def render_credentials(self, to_email: str, password: str, employee_name: Optional[str] = None) -> MIMEMultipart:
        """Build the credentials message without sending it."""
        html_content = CREDENTIALS_TEMPLATE.render(
            email=to_email,
            password=password,
            employee_name=employee_name
        )

        message = MIMEMultipart("alternative")
        message["Subject"] = "Seus dados de acesso - BV Celular"
        message["From"] = self.from_email or ""
        message["To"] = to_email
        message.attach(MIMEText(html_content, "html"))
        return message

    async def send_employee_credentials_email(self, to_email: str, password: str, employee_name: Optional[str] = None):
        """
        Send employee account credentials via email.

        Args:
            to_email: Employee's email address
            password: Generated password
            employee_name: Optional employee name
        """
        message = self.render_credentials(to_email, password, employee_name)

        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_server,
                port=self.smtp_port,
                start_tls=True,
                username=self.smtp_username,
                password=self.smtp_password,
            )
            return True
        except Exception as e:
            print(f"Failed to send email: {str(e)}")
            raise Exception(f"Failed to send credentials email: {str(e)}")


# Global email service instance
email_service = EmailService()
