"""
auth — User authentication module.

Provides:
  • Password policy validation and bcrypt hashing
  • Opaque, expiring sessions (``SessionIssuer``)
  • Local register / login and federated identity reconciliation
  • Register / Login API routes and the ``get_current_session`` dependency
"""
