import asyncio
import html
import logging
from typing import Any, Dict, Optional

import resend
from fastapi import HTTPException

from headshots.config.settings import settings

logger = logging.getLogger(__name__)

TRAINING_SUBJECT = "🎉 Your AI Model is Ready!"


def render_training_email(tune_id: str, site_url: str, user_name: Optional[str] = None) -> str:
    greeting = f"Great news, {html.escape(user_name)}!" if user_name else "Great news!"
    return f"""
        <h1>{greeting}</h1>
        <p>Your personalized AI model has finished training and is ready to create professional headshots.</p>
        <p><strong>Ready to generate your headshots?</strong></p>
        <p><a href="{html.escape(site_url, quote=True)}" style="background: #2563eb; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">Create Your Headshots</a></p>
        <p>Your model ID: <code>{html.escape(tune_id)}</code></p>
        <p>Best regards,<br>The AI Headshots Team</p>
    """


class NotificationService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        site_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.sender = sender or settings.resend_from
        self.site_url = site_url or settings.site_url

    async def send_training_notification(self, email: str, tune_id: str, user_name: Optional[str] = None) -> Dict[str, Any]:
        """Email the user that their tune finished training. The Resend SDK blocks, so it runs on the default executor."""
        if not self.api_key:
            logger.error("RESEND_API_KEY not configured")
            raise HTTPException(status_code=500, detail="Email provider not configured")

        resend.api_key = self.api_key
        params = {
            "from": self.sender,
            "to": [email],
            "subject": TRAINING_SUBJECT,
            "html": render_training_email(tune_id, self.site_url, user_name),
        }
        try:
            loop = asyncio.get_running_loop()
            response = await loop.run_in_executor(None, resend.Emails.send, params)
        except Exception as e:
            logger.error(f"Error sending training notification: {e}")
            raise HTTPException(status_code=502, detail=f"Failed to send notification: {e}")

        logger.info(f"Training notification sent for tune {tune_id}: {response}")
        return dict(response) if response else {}
