"""scim-bridge: mirror identity-provider user lifecycle events to a SCIM 2.0 directory."""

__version__ = "0.1.0"
