"""
Single query/mutation boundary.

``execute(name, arguments, actor)`` looks the operation up by name, runs it
with the actor passed explicitly, and returns ``{'data': ...}`` or
``{'error': {'kind': ..., 'message': ...}}``. Status codes are the HTTP
layer's business.
"""
from sqlalchemy.exc import SQLAlchemyError

from auth.permissions import require_actor, require_admin
from services.admin_service import AdminService
from services.auth_service import AuthService
from services.candidate_service import (CandidateService, DEFAULT_CANDIDATE_LIMIT,
                                        MAX_CANDIDATE_LIMIT)
from services.conversation_service import ConversationService
from services.like_service import LikeService
from services.matching_service import MatchingService
from services.profile_service import ProfileService
from services.stats_service import StatsService
from utils.errors import InternalError, InvalidOperation, KindredError, Unauthorized
from utils.logging_config import log_error
from utils.validators import parse_id, parse_limit, parse_offset

DEFAULT_MATCH_LIMIT = 50
MAX_PAGE_LIMIT = 100


class OperationService:
    def __init__(self, db, bcrypt, cache, logger):
        self.db = db
        self.logger = logger

        self.matching_service = MatchingService(db, logger)
        self.like_service = LikeService(db, self.matching_service, logger)
        self.candidate_service = CandidateService(db, logger)
        self.conversation_service = ConversationService(db, logger)
        self.auth_service = AuthService(db, bcrypt, logger)
        self.profile_service = ProfileService(db, self.like_service, logger)
        self.stats_service = StatsService(db, cache, logger)
        self.admin_service = AdminService(
            db, self.auth_service, self.profile_service, self.matching_service, logger
        )

        self.queries = {
            'current_user': self.current_user,
            'user': self.user,
            'potential_users': self.potential_users,
            'matches': self.matches,
            'conversations': self.conversations,
            'messages': self.messages,
            'admin_dashboard': self.admin_dashboard,
            'admin_user_stats': self.admin_user_stats,
        }
        self.mutations = {
            'register_user': self.register_user,
            'login_user': self.login_user,
            'update_profile': self.update_profile,
            'upload_photo': self.upload_photo,
            'delete_photo': self.delete_photo,
            'set_primary_photo': self.set_primary_photo,
            'like_user': self.like_user,
            'dislike_user': self.dislike_user,
            'unmatch_user': self.unmatch_user,
            'send_message': self.send_message,
            'delete_account': self.delete_account,
            'admin_create_user': self.admin_create_user,
            'admin_update_user': self.admin_update_user,
            'admin_delete_user': self.admin_delete_user,
            'admin_delete_match': self.admin_delete_match,
        }

    def execute(self, name, arguments, actor):
        handler = self.queries.get(name) or self.mutations.get(name)
        if handler is None:
            return {'error': InvalidOperation(f"Unknown operation: {name}").to_dict()}

        try:
            return {'data': handler(arguments or {}, actor)}
        except KindredError as e:
            self.db.session.rollback()
            self.logger.info(f"Operation {name} rejected: {e.kind}: {e.message}")
            return {'error': e.to_dict()}
        except SQLAlchemyError as e:
            self.db.session.rollback()
            log_error(self.logger, e, context=f"operation={name}")
            return {'error': InternalError(f"Operation {name} failed").to_dict()}

    # === QUERIES ===

    def current_user(self, args, actor):
        require_actor(actor)
        return actor.to_dict(include_private=True)

    def user(self, args, actor):
        user_id = parse_id(args.get('id'), 'id')
        user = self.profile_service.get_user(user_id)
        private = actor is not None and (actor.id == user.id or actor.is_admin)
        return user.to_dict(include_private=private)

    def potential_users(self, args, actor):
        require_actor(actor)
        limit = parse_limit(args.get('limit'), DEFAULT_CANDIDATE_LIMIT, MAX_CANDIDATE_LIMIT)
        return [u.to_dict() for u in self.candidate_service.next_candidates(actor.id, limit)]

    def matches(self, args, actor):
        require_actor(actor)
        user_id = actor.id
        if args.get('user_id') is not None:
            user_id = parse_id(args['user_id'], 'user_id')
            if user_id != actor.id and not actor.is_admin:
                raise Unauthorized("Cannot list another user's matches")
            self.profile_service.get_user(user_id)

        limit = parse_limit(args.get('limit'), DEFAULT_MATCH_LIMIT, MAX_PAGE_LIMIT)
        offset = parse_offset(args.get('offset'))
        return [
            m.to_dict(viewer_id=user_id)
            for m in self.matching_service.list_matches(user_id, limit, offset)
        ]

    def conversations(self, args, actor):
        require_actor(actor)
        return [c.to_dict() for c in self.conversation_service.list_conversations(actor.id)]

    def messages(self, args, actor):
        require_actor(actor)
        conversation_id = parse_id(args.get('conversation_id'), 'conversation_id')
        return [
            m.to_dict()
            for m in self.conversation_service.list_messages(conversation_id, viewer=actor)
        ]

    def admin_dashboard(self, args, actor):
        require_admin(actor)
        return self.stats_service.get_admin_dashboard().to_dict()

    def admin_user_stats(self, args, actor):
        require_admin(actor)
        limit = parse_limit(args.get('limit'), DEFAULT_MATCH_LIMIT, MAX_PAGE_LIMIT)
        offset = parse_offset(args.get('offset'))
        return [s.to_dict() for s in self.stats_service.get_user_stats(limit, offset)]

    # === MUTATIONS ===

    def register_user(self, args, actor):
        return self.auth_service.register(args)

    def login_user(self, args, actor):
        return self.auth_service.login(args)

    def update_profile(self, args, actor):
        user = self.profile_service.update_profile(actor, args)
        return {'user': user.to_dict(include_private=True)}

    def upload_photo(self, args, actor):
        photo = self.profile_service.upload_photo(actor, args.get('url'))
        return {'photo': photo.to_dict()}

    def delete_photo(self, args, actor):
        self.profile_service.delete_photo(actor, parse_id(args.get('photo_id'), 'photo_id'))
        return {'success': True}

    def set_primary_photo(self, args, actor):
        photo = self.profile_service.set_primary_photo(
            actor, parse_id(args.get('photo_id'), 'photo_id')
        )
        return {'photo': photo.to_dict(), 'success': True}

    def like_user(self, args, actor):
        require_actor(actor)
        target_id = parse_id(args.get('target_user_id'), 'target_user_id')
        like, result = self.like_service.like_user(actor, target_id)
        return {
            'like': like.to_dict(),
            'match': result.match.to_dict(viewer_id=actor.id) if result.match else None,
            'matched': result.match is not None,
            'match_created': result.created
        }

    def dislike_user(self, args, actor):
        require_actor(actor)
        target_id = parse_id(args.get('target_user_id'), 'target_user_id')
        like, result = self.like_service.dislike_user(actor, target_id)
        return {'success': True, 'like': like.to_dict(), 'match_removed': result.destroyed}

    def unmatch_user(self, args, actor):
        require_actor(actor)
        match_id = target_id = None
        if args.get('match_id') is not None:
            match_id = parse_id(args['match_id'], 'match_id')
        elif args.get('target_user_id') is not None:
            target_id = parse_id(args['target_user_id'], 'target_user_id')
        self.matching_service.unmatch(actor, match_id=match_id, target_user_id=target_id)
        return {'success': True}

    def send_message(self, args, actor):
        require_actor(actor)
        match_id = parse_id(args.get('match_id'), 'match_id')
        message = self.conversation_service.send_message(actor, match_id, args.get('content'))
        return {'message': message.to_dict()}

    def delete_account(self, args, actor):
        require_actor(actor)
        self.profile_service.delete_account(actor)
        return {'success': True}

    def admin_create_user(self, args, actor):
        user = self.admin_service.create_user(actor, args)
        self.stats_service.invalidate_dashboard()
        return {'user': user.to_dict(include_private=True)}

    def admin_update_user(self, args, actor):
        require_admin(actor)
        user_id = parse_id(args.get('id'), 'id')
        fields = {k: v for k, v in args.items() if k != 'id'}
        user = self.admin_service.update_user(actor, user_id, fields)
        return {'user': user.to_dict(include_private=True)}

    def admin_delete_user(self, args, actor):
        require_admin(actor)
        self.admin_service.delete_user(actor, parse_id(args.get('id'), 'id'))
        self.stats_service.invalidate_dashboard()
        return {'success': True}

    def admin_delete_match(self, args, actor):
        require_admin(actor)
        self.admin_service.delete_match(actor, parse_id(args.get('id'), 'id'))
        self.stats_service.invalidate_dashboard()
        return {'success': True}
