"""
REST clients for the services simulado-cli talks to.

Modules:
- exam_client: exam lifecycle (create, answer, finalize, history)
- topics_client: four-level topic taxonomy
- auth_client: users API with a persisted bearer token
- conversation_client: question-scoped help chat
"""
from .auth_client import AuthClient
from .conversation_client import ConversationClient
from .exam_client import ExamClient
from .topics_client import TopicsClient

__all__ = ["AuthClient", "ConversationClient", "ExamClient", "TopicsClient"]
