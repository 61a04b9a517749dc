"""
client — browser-side session handling, written against the auth API.

Provides:
  • ``SessionEvidenceStore`` over durable / volatile storage
  • ``SessionGuard`` deciding whether a protected view may render
  • ``AuthApiClient`` for register, login and federated-session calls
"""
