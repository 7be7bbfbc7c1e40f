"""
邮件服务模块。
通过Django邮件后端发送通知邮件，发送失败只记录日志，不影响业务操作。
"""
from abc import ABC, abstractmethod
import smtplib
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail
from loguru import logger


class EmailService(ABC):
    """邮件服务接口"""

    @abstractmethod
    def send_email(self, to: str, subject: str, body: str, html_body: Optional[str] = None) -> bool:
        """
        发送邮件。

        Args:
            to: 收件人地址
            subject: 主题
            body: 纯文本正文
            html_body: HTML正文，可选

        Returns:
            是否发送成功
        """
        pass


class DjangoEmailService(EmailService):
    """基于django.core.mail的邮件服务，后端由settings.EMAIL_BACKEND决定"""

    def __init__(self, from_email: Optional[str] = None):
        self.from_email = from_email or getattr(settings, "DEFAULT_FROM_EMAIL", None)

    def send_email(self, to: str, subject: str, body: str, html_body: Optional[str] = None) -> bool:
        try:
            send_mail(subject, body, self.from_email, [to], html_message=html_body, fail_silently=False)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"邮件发送失败: to={to} subject={subject}: {e}")
            return False
        logger.info(f"邮件已发送: to={to} subject={subject}")
        return True
