"""
OM Spiritual Backend - Payment Schemas
=======================================

What:  create-subscription request/response and the webhook acknowledgement.

The webhook body itself is not modelled here: its signature has to be checked
against the raw bytes, so BillingService parses it only after verification.
"""

from pydantic import BaseModel, Field


class CreateSubscriptionRequest(BaseModel):
    plan_id: str = Field(alias="planId", min_length=1, max_length=100, description="e.g. plan_monthly")

    model_config = {"populate_by_name": True}


class SubscriptionResponse(BaseModel):
    id: str = Field(description="Processor subscription id (sub_...)")
    status: str = Field(description="Processor status, 'created' for new subscriptions")
    url: str = Field(description="Hosted checkout link to send the user to")


class WebhookAck(BaseModel):
    status: str = Field(default="ok")
