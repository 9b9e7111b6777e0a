"""
Websites component - Tracked website management.
"""

from ._impl import InMemoryWebsiteRepo, WebsiteService, validate_website_data
from .component import run_create, run_list
from .models import CreateWebsiteInput, ListWebsitesInput, WebsiteSummary
from .ports import WebsiteRepoPort

__all__ = [
    # Entry points
    "run_create",
    "run_list",
    # Input models
    "CreateWebsiteInput",
    "ListWebsitesInput",
    # Output models
    "WebsiteSummary",
    # Ports
    "WebsiteRepoPort",
    # Service
    "InMemoryWebsiteRepo",
    "WebsiteService",
    "validate_website_data",
]
