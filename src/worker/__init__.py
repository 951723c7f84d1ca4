"""Command-line workers for billing service"""
from .seed_billing_demo import BillingDemoSeeder

__all__ = ["BillingDemoSeeder"]
