"""
assistant/ - Responder-facing reply generation.
"""

from .chat_engine import ChatEngine, ChatResult, get_chat_engine

__all__ = ["ChatEngine", "ChatResult", "get_chat_engine"]
