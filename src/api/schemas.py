from uuid import UUID

from pydantic import BaseModel, Field

# --- Newsletter Publishing ---


class NewsletterContent(BaseModel):
    html: str = Field(..., description="HTML body of the issue")
    text: str = Field(..., description="Plain text body of the issue")


class PublishNewsletterRequest(BaseModel):
    title: str = Field(..., description="Issue title, used as the email subject")
    content: NewsletterContent


class PublishNewsletterResponse(BaseModel):
    sent: int = Field(..., description="Subscribers the issue was delivered to")
    skipped: int = Field(..., description="Confirmed subscribers skipped for invalid stored data")


# --- Subscriptions ---


class SubscribeResponse(BaseModel):
    subscriber_id: UUID
    message: str


class ConfirmResponse(BaseModel):
    subscriber_id: UUID
    message: str


class ErrorResponse(BaseModel):
    detail: str
