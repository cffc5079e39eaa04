"""ColdSync logistics platform: role-based authorization engine."""

__version__ = "0.1.0"
