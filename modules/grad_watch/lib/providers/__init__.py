# grad_watch/providers/__init__.py
from __future__ import annotations

# Importing the adapter modules registers them with the registry
from .amazon import AmazonJobsAdapter
from .ashby import AshbyAdapter
from .base import BaseAdapter
from .greenhouse import GreenhouseAdapter
from .lever import LeverAdapter
from .microsoft import MicrosoftCareersAdapter
from .registry import all_portals, all_providers, get, get_portal
from .smartrecruiters import SmartRecruitersAdapter
from .workable import WorkableAdapter

__all__ = [
    "AmazonJobsAdapter",
    "AshbyAdapter",
    "BaseAdapter",
    "GreenhouseAdapter",
    "LeverAdapter",
    "MicrosoftCareersAdapter",
    "SmartRecruitersAdapter",
    "WorkableAdapter",
    "all_portals",
    "all_providers",
    "get",
    "get_portal",
]
