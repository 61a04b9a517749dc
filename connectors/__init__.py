"""
connectors — external identity providers for federated sign-in.

Provides a small provider framework that handles:
  • OAuth2 auth-URL generation
  • Callback handling (code → token exchange → verified profile)

Each provider (Google, …) is a subclass of BaseIdentityProvider.
"""
