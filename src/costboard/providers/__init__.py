"""Billing API provider integrations for AWS, OpenAI, Vercel, Cursor and model vendors."""

# Import provider implementations to register them with ProviderFactory
from . import aws
from . import cursor
from . import model_billing
from . import openai
from . import vercel

# Make key classes available at package level
from .base import (
    APIError,
    AuthenticationError,
    BillingProvider,
    CloudProviderError,
    ConfigurationError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
    ProviderFactory,
    RateLimitError,
)
