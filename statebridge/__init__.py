"""
StateBridge: HTTP façade over a sidecar key-value state store.

Stores accounts through the sidecar state API and maps its responses back
onto HTTP outcomes.
"""

__version__ = "0.1.0"

from .core.runtime import StateBridgeRuntime, create_app

__all__ = ["StateBridgeRuntime", "create_app", "__version__"]
