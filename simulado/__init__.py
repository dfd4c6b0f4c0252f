"""
simulado-cli - terminal client for the simulado practice-exam service.

Packages:
- core: state store, session lifecycle, answer pipeline, topic filter
- integrations: REST clients for the exam, topic, auth and conversation APIs
- cli: typer front end
"""

__version__ = "1.0.0"
