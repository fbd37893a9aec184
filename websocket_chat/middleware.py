import logging
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.middleware import BaseMiddleware

from campusdeals.exceptions import Unauthenticated
from campusdeals.jwt_utils import authenticate_token

logger = logging.getLogger(__name__)

AUTH_FAILED_CLOSE_CODE = 4001


class WebSocketAuthMiddleware(BaseMiddleware):
    """
    Authenticates the websocket handshake before the consumer runs.

    The bearer token comes from the ``token`` query parameter or the
    ``Authorization`` header. A missing or invalid token closes the handshake
    with code 4001, so no presence entry is ever registered for it.
    """

    async def __call__(self, scope, receive, send):
        token = self.get_token(scope)

        if not token:
            logger.warning("Socket connection attempt without token")
            await self.reject(send, 'Authentication required')
            return

        try:
            user = await sync_to_async(authenticate_token)(token)
        except Unauthenticated as e:
            logger.error(f"Socket authentication error: {e.message}")
            await self.reject(send, 'Invalid or expired token')
            return

        scope = dict(scope, user=user, user_id=user.id, authenticated=True)
        logger.info(f"Socket authenticated for user {user.email} ({user.id})")

        return await super().__call__(scope, receive, send)

    @staticmethod
    def get_token(scope):
        query_params = parse_qs(scope.get('query_string', b'').decode())
        token = query_params.get('token', [None])[0]
        if token:
            return token

        for name, value in scope.get('headers', []):
            if name.lower() == b'authorization':
                return value.decode()
        return None

    @staticmethod
    async def reject(send, reason):
        await send({
            'type': 'websocket.close',
            'code': AUTH_FAILED_CLOSE_CODE,
            'reason': reason,
        })
