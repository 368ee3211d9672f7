"""Clients for the cost proxy that produce normalised provider summaries."""

from .aws import AWSService
from .base import ProviderClient, ProviderClientError
from .cursor import CursorService
from .model_billing import MODEL_VENDORS, ModelBillingService
from .models import (
    CostSummary,
    CursorUsageSummary,
    ModelBillingData,
    OpenAIUsageData,
    OpenAIUsageSummary,
)
from .openai import OpenAIService
from .vercel import VercelService
