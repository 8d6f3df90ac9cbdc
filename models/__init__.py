"""Data models and utility functions.

This package contains:
- types: BridgeRecord, ApplicationRecord and N-UPnP entry types
- utils: Utility functions (device_type, percent_to_unit_interval, etc.)
"""
