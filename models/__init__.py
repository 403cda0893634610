# models/__init__.py
from models.user import User
from models.photo import Photo
from models.like import Like
from models.match import Match
from models.conversation import Conversation, Message

__all__ = [
    'User', 'Photo', 'Like', 'Match', 'Conversation', 'Message'
]
