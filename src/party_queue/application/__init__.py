"""
Application Layer

Orchestrates the domain rules and the persistence ports into the guest-facing
and moderator-facing operations.

Structure:
- services/: Application services (admission, prequeue, votes, queue view, admin)
- interfaces/: Port interfaces for infrastructure adapters
"""
