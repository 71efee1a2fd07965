"""Infrastructure layer — coordination stores, key material, artifacts, polling.

This layer depends on stdlib and third-party libs (cryptography, git binary).
It must never import from domain, services, commands, or output.
The service layer bridges between domain models and infrastructure.
"""
