"""Car wash CRM backend: leads, washers, scheduling and billing."""

__version__ = "0.1.0"
