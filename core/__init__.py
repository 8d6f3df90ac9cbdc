"""Core functionality for hue-lib.

This package contains:
- config: ConfigStore for bridge and application records
- discovery: BridgeDiscoverer (SSDP with N-UPnP fallback)
- bridge: BridgeHandle for registration and authenticated calls
- registration: RegistrationCoordinator for the default application
- errors: Error types
- log: Log file setup
"""
